"""AI crawler exposure analysis runner.

Runs the exposure checks for one site:
- robots.txt AI crawler policy (first, it feeds the sitemap list)
- sitemap page count and tech-stack fingerprint (concurrently)
- optional Firecrawl sample crawl when no sitemap could be counted
- traffic estimate and risk score

Every check degrades to its documented default, so the runner always
returns a report for a well-formed URL.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from api.config import Settings, get_settings
from api.metrics import record_analyzer_run
from worker.crawler.fetcher import Fetcher
from worker.crawler.registry import CrawlerRegistry, load_registry
from worker.crawler.robots import RobotsAnalysis, RobotsTxtAnalyzer
from worker.crawler.sample import SampleCrawler
from worker.crawler.sitemap import SitemapAnalysis, SitemapAnalyzer
from worker.crawler.techstack import TechStackDetector, TechStackInfo
from worker.crawler.url import normalize_domain
from worker.scoring.exposure import (
    ExposureEstimate,
    RiskScore,
    calculate_risk_score,
    estimate_exposure,
)

logger = structlog.get_logger(__name__)


@dataclass
class CrawlerAccess:
    """Whether one known crawler may read the site."""

    name: str
    company: str
    allowed: bool

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "allowed": self.allowed, "company": self.company}


@dataclass
class ExposureReport:
    """Complete exposure analysis for a domain."""

    domain: str
    risk_score: RiskScore
    robots_txt: RobotsAnalysis
    sitemap: SitemapAnalysis
    tech_stack: TechStackInfo
    estimates: ExposureEstimate
    ai_crawlers: list[CrawlerAccess] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain,
            "risk_score": self.risk_score.value,
            "robots_txt": self.robots_txt.to_dict(),
            "sitemap": self.sitemap.to_dict(),
            "tech_stack": self.tech_stack.to_dict(),
            "estimates": self.estimates.to_dict(),
            "ai_crawlers": [c.to_dict() for c in self.ai_crawlers],
        }


def crawler_access(robots: RobotsAnalysis, registry: CrawlerRegistry) -> list[CrawlerAccess]:
    return [
        CrawlerAccess(name=s.name, company=s.company, allowed=robots.is_allowed(s.name))
        for s in registry.robots_agents
    ]


async def run_exposure_analysis(
    url: str,
    settings: Settings | None = None,
    registry: CrawlerRegistry | None = None,
    client: httpx.AsyncClient | None = None,
) -> ExposureReport:
    """
    Analyze how exposed a site is to AI crawlers.

    Args:
        url: Site URL or bare domain
        settings: Timeouts and estimate constants (defaults to app settings)
        registry: Crawler registry (defaults to the configured one)
        client: Optional shared HTTP client; one is created and closed otherwise

    Returns:
        ExposureReport

    Raises:
        ValueError: If no domain can be derived from ``url``
    """
    settings = settings or get_settings()
    registry = registry or load_registry(settings.crawler_registry_path)

    domain = normalize_domain(url)
    if domain is None:
        raise ValueError(f"Cannot derive a domain from {url!r}")

    logger.info("exposure_analysis_starting", domain=domain)

    async with Fetcher(user_agent=settings.analyzer_user_agent, client=client) as fetcher:
        robots = await RobotsTxtAnalyzer(
            fetcher, registry, timeout=settings.robots_timeout
        ).analyze(domain)

        sitemap_analyzer = SitemapAnalyzer(
            fetcher,
            timeout=settings.sitemap_timeout,
            child_sample_limit=settings.sitemap_child_sample_limit,
            fallback_pages_per_child=settings.sitemap_fallback_pages_per_child,
        )
        detector = TechStackDetector(fetcher, timeout=settings.homepage_timeout)

        sitemap, tech_stack = await asyncio.gather(
            sitemap_analyzer.analyze(domain, robots.sitemaps),
            detector.detect(domain),
        )

    if sitemap.page_count == 0 and settings.sample_crawl_enabled:
        sample = await SampleCrawler(
            settings.firecrawl_api_key or "",
            limit=settings.sample_crawl_limit,
            timeout=settings.sample_crawl_timeout,
            api_url=settings.firecrawl_map_url,
            client=client,
        ).crawl(domain)
        sitemap = sitemap.with_sample_floor(sample.discovered_count)

    # Sites without a countable sitemap still get a baseline estimate
    page_count = sitemap.page_count or settings.exposure_default_page_count

    estimates = estimate_exposure(
        page_count,
        robots.allows_ai_bots,
        sitemap_urls=robots.sitemaps,
        cost_per_thousand=settings.exposure_cost_per_thousand,
    )
    risk = calculate_risk_score(robots.allows_ai_bots, page_count, tech_stack.has_protection)
    record_analyzer_run(risk.value)

    report = ExposureReport(
        domain=domain,
        risk_score=risk,
        robots_txt=robots,
        sitemap=sitemap,
        tech_stack=tech_stack,
        estimates=estimates,
        ai_crawlers=crawler_access(robots, registry),
    )

    logger.info(
        "exposure_analysis_complete",
        domain=domain,
        risk_score=risk.value,
        page_count=sitemap.page_count,
        monthly_bot_requests=estimates.monthly_bot_requests,
    )
    return report


def run_exposure_analysis_sync(url: str) -> dict[str, Any]:
    """
    Synchronous wrapper for the exposure analysis.

    Entry point for scripts and job runners that cannot await.
    """
    return asyncio.run(run_exposure_analysis(url)).to_dict()
