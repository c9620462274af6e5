"""Sitemap analyzer for estimating how many pages a site exposes.

Counts are approximate by design: sitemap indexes are sampled rather than
walked in full, and overlapping candidates (``/sitemap.xml`` and a robots.txt
entry pointing at the same index under another name) are not reconciled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from xml.etree import ElementTree as ET

import structlog

from worker.crawler.fetcher import Fetcher, FetchResult
from worker.crawler.url import ensure_absolute

logger = structlog.get_logger(__name__)

# Conventional locations tried before robots.txt declarations
CONVENTIONAL_PATHS = (
    "/sitemap.xml",
    "/sitemap_index.xml",
    "/sitemap-index.xml",
    "/sitemap1.xml",
    "/sitemap.txt",
)


@dataclass
class SitemapAnalysis:
    """Approximate page count across a site's sitemaps."""

    exists: bool
    page_count: int
    estimated: bool

    @classmethod
    def not_found(cls) -> SitemapAnalysis:
        return cls(exists=False, page_count=0, estimated=True)

    def with_sample_floor(self, discovered: int) -> SitemapAnalysis:
        """Raise an empty count to the number of pages a sample crawl found."""
        if self.page_count > 0 or discovered <= 0:
            return self
        return SitemapAnalysis(exists=True, page_count=discovered, estimated=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "exists": self.exists,
            "page_count": self.page_count,
            "estimated": self.estimated,
        }


@dataclass
class SitemapDocument:
    """What one parsed sitemap body contains."""

    url_count: int = 0
    child_sitemaps: tuple[str, ...] = ()


@dataclass
class _Contribution:
    pages: int
    estimated: bool = False


def _local_name(tag: str) -> str:
    """Strip an ElementTree ``{namespace}`` prefix."""
    return tag.rsplit("}", 1)[-1].lower()


def parse_sitemap_xml(body: str) -> SitemapDocument:
    """
    Parse a sitemap or sitemap index, ignoring namespaces.

    Raises:
        ValueError: If the body is not well-formed XML
    """
    try:
        root = ET.fromstring(body.lstrip("\ufeff").strip())
    except ET.ParseError as e:
        raise ValueError(f"Invalid XML: {e}") from e

    root_name = _local_name(root.tag)

    if "urlset" in root_name:
        count = sum(1 for child in root if _local_name(child.tag) == "url")
        return SitemapDocument(url_count=count)

    if "sitemapindex" in root_name:
        children: list[str] = []
        for entry in root:
            if _local_name(entry.tag) != "sitemap":
                continue
            for loc in entry:
                if _local_name(loc.tag) == "loc" and loc.text and loc.text.strip():
                    children.append(loc.text.strip())
                    break
        return SitemapDocument(child_sitemaps=tuple(children))

    return SitemapDocument()


def count_text_sitemap(body: str) -> int:
    """A plain-text sitemap lists one URL per non-blank line."""
    return sum(1 for line in body.splitlines() if line.strip())


def build_candidates(domain: str, robots_sitemaps: list[str]) -> list[str]:
    """Conventional paths then robots.txt sitemaps, absolute and de-duplicated."""
    candidates = [f"https://{domain}{path}" for path in CONVENTIONAL_PATHS]
    candidates.extend(ensure_absolute(url, domain) for url in robots_sitemaps)
    return list(dict.fromkeys(candidates))


class SitemapAnalyzer:
    """Fetches sitemap candidates one by one and totals their page counts."""

    def __init__(
        self,
        fetcher: Fetcher,
        timeout: float = 7.0,
        child_sample_limit: int = 15,
        fallback_pages_per_child: int = 500,
    ):
        self.fetcher = fetcher
        self.timeout = timeout
        self.child_sample_limit = child_sample_limit
        self.fallback_pages_per_child = fallback_pages_per_child

    async def analyze(self, domain: str, robots_sitemaps: list[str] | None = None) -> SitemapAnalysis:
        """
        Estimate the page count for a domain.

        Args:
            domain: Bare host name
            robots_sitemaps: Sitemap URLs declared in robots.txt

        Returns:
            SitemapAnalysis; ``not_found()`` when no candidate yielded a body
        """
        candidates = build_candidates(domain, robots_sitemaps or [])

        total = 0
        found_any = False
        estimated = False

        for url in candidates:
            contribution = await self._analyze_candidate(domain, url)
            if contribution is None:
                continue
            found_any = True
            total += contribution.pages
            estimated = estimated or contribution.estimated

        if not found_any:
            logger.info("sitemap_not_found", domain=domain, candidates=len(candidates))
            return SitemapAnalysis.not_found()

        logger.info(
            "sitemap_analysis_complete",
            domain=domain,
            page_count=total,
            estimated=estimated,
            candidates=len(candidates),
        )
        return SitemapAnalysis(exists=True, page_count=total, estimated=estimated)

    async def _analyze_candidate(self, domain: str, url: str) -> _Contribution | None:
        """Contribution of one top-level candidate, or None when it is unusable."""
        result = await self.fetcher.fetch(url, timeout=self.timeout)
        if not result.success:
            logger.debug("sitemap_candidate_skipped", url=url, error=result.error)
            return None

        body = result.text
        if not body.strip():
            logger.debug("sitemap_candidate_empty", url=url)
            return None

        if _is_text_sitemap(result):
            return _Contribution(pages=count_text_sitemap(body))

        try:
            document = parse_sitemap_xml(body)
        except ValueError as e:
            logger.warning("sitemap_parse_failed", url=url, error=str(e))
            return None

        if document.url_count > 0:
            return _Contribution(pages=document.url_count)

        if document.child_sitemaps:
            children = [ensure_absolute(child, domain) for child in document.child_sitemaps]
            return await self._sample_index(url, children)

        return _Contribution(pages=0)

    async def _sample_index(self, index_url: str, children: list[str]) -> _Contribution:
        """Count a bounded sample of an index's children and extrapolate."""
        sampled = children[: self.child_sample_limit]
        counted = 0
        pages = 0

        for child_url in sampled:
            child_count = await self._count_child(child_url)
            if child_count > 0:
                pages += child_count
                counted += 1

        if counted == 0:
            logger.info(
                "sitemap_index_unsampled",
                url=index_url,
                children=len(children),
                pages_per_child=self.fallback_pages_per_child,
            )
            return _Contribution(pages=len(children) * self.fallback_pages_per_child, estimated=True)

        if len(children) > counted:
            average = pages / counted
            logger.info(
                "sitemap_index_extrapolated",
                url=index_url,
                children=len(children),
                sampled=counted,
                average=round(average, 1),
            )
            return _Contribution(pages=round_half_up(average * len(children)), estimated=True)

        return _Contribution(pages=pages)

    async def _count_child(self, url: str) -> int:
        result = await self.fetcher.fetch(url, timeout=self.timeout)
        if not result.success:
            return 0
        body = result.text
        if _is_text_sitemap(result):
            return count_text_sitemap(body)
        try:
            return parse_sitemap_xml(body).url_count
        except ValueError as e:
            logger.debug("sitemap_child_parse_failed", url=url, error=str(e))
            return 0


def _is_text_sitemap(result: FetchResult) -> bool:
    path = result.url.lower()
    if path.endswith(".gz"):
        path = path[:-3]
    return path.endswith(".txt")


def round_half_up(value: float) -> int:
    """Round non-negative values the way JavaScript's Math.round does."""
    return int(value + 0.5)
