"""Sample crawl through the Firecrawl API.

Used only when a site has no countable sitemap: a small URL discovery pass
gives a data-backed floor for the page count instead of the flat default.
Like the other analyzers, failures come back on the result and never raise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

logger = structlog.get_logger(__name__)

FIRECRAWL_MAP_URL = "https://api.firecrawl.dev/v1/map"
DEFAULT_SAMPLE_LIMIT = 30


@dataclass
class SampleCrawlResult:
    """URLs discovered for a domain, capped at the sample limit."""

    discovered_urls: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def discovered_count(self) -> int:
        return len(self.discovered_urls)

    @property
    def success(self) -> bool:
        return self.error is None


def _link_url(link: Any) -> str | None:
    # v1 returns bare strings, newer API versions return {"url": ...} objects
    if isinstance(link, str):
        return link
    if isinstance(link, dict):
        url = link.get("url")
        return url if isinstance(url, str) else None
    return None


class SampleCrawler:
    """Discovers up to ``limit`` URLs of a site via Firecrawl's map endpoint."""

    def __init__(
        self,
        api_key: str,
        limit: int = DEFAULT_SAMPLE_LIMIT,
        timeout: float = 20.0,
        api_url: str = FIRECRAWL_MAP_URL,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.limit = limit
        self.timeout = timeout
        self.api_url = api_url
        self._client = client

    async def crawl(self, domain: str) -> SampleCrawlResult:
        payload = {"url": f"https://{domain}", "limit": self.limit}
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            if self._client is not None:
                response = await self._client.post(
                    self.api_url, json=payload, headers=headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.TimeoutException:
            logger.info("sample_crawl_timeout", domain=domain)
            return SampleCrawlResult(error="Request timed out")
        except httpx.HTTPError as e:
            logger.info("sample_crawl_failed", domain=domain, error=str(e))
            return SampleCrawlResult(error=f"{type(e).__name__}: {e}")

        if response.status_code != 200:
            logger.info("sample_crawl_rejected", domain=domain, status_code=response.status_code)
            return SampleCrawlResult(error=f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            return SampleCrawlResult(error="Invalid JSON response")
        if not isinstance(data, dict):
            return SampleCrawlResult(error="Unexpected response shape")
        if not data.get("success", False):
            return SampleCrawlResult(error=str(data.get("error") or "Crawl unsuccessful"))

        urls: list[str] = []
        for link in data.get("links") or []:
            url = _link_url(link)
            if url and url not in urls:
                urls.append(url)

        result = SampleCrawlResult(discovered_urls=urls[: self.limit])
        logger.info("sample_crawl_complete", domain=domain, discovered=result.discovered_count)
        return result
