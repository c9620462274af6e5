"""Homepage platform and bot-protection detection."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import structlog
from bs4 import BeautifulSoup

from worker.crawler.fetcher import Fetcher, FetchResult

logger = structlog.get_logger(__name__)


class Platform(StrEnum):
    """Site platforms we can fingerprint."""

    WORDPRESS = "WordPress"
    NEXTJS = "Next.js"
    REACT = "React"
    SHOPIFY = "Shopify"
    WIX = "Wix"
    SQUARESPACE = "Squarespace"
    UNKNOWN = "Unknown"


@dataclass
class TechStackInfo:
    """Detected platform plus any bot-mitigation signals."""

    platform: Platform = Platform.UNKNOWN
    has_protection: bool = False
    indicators: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "platform": self.platform.value,
            "has_protection": self.has_protection,
            "indicators": self.indicators,
        }


_WP_ASSETS = re.compile(r"wp-content|wp-includes", re.IGNORECASE)
_NEXT_ASSETS = re.compile(r"/_next/")
_REACT_MARKERS = re.compile(r"react|__NEXT_DATA__", re.IGNORECASE)
_SHOPIFY = re.compile(r"Shopify", re.IGNORECASE)
_WIX = re.compile(r"Wix|wixStatic", re.IGNORECASE)
_SQUARESPACE = re.compile(r"squarespace", re.IGNORECASE)
_VENDOR_MARKER = re.compile(r"crawlguard|crawltoll", re.IGNORECASE)


def _generator(html: str) -> str:
    """Content of ``<meta name="generator">``, if any."""
    soup = BeautifulSoup(html, "html.parser")
    tag = soup.find("meta", attrs={"name": re.compile(r"^generator$", re.IGNORECASE)})
    if tag is None:
        return ""
    content = tag.get("content")
    return content if isinstance(content, str) else ""


def _is_wordpress(html: str, result: FetchResult) -> bool:
    return (
        bool(_WP_ASSETS.search(html))
        or _generator(html).lower().startswith("wordpress")
        or "wordpress" in result.header("x-redirect-by").lower()
    )


def _is_nextjs(html: str, result: FetchResult) -> bool:
    return bool(_NEXT_ASSETS.search(html)) or "Next.js" in result.header("x-powered-by")


# Checked in order; the first match decides the platform
PLATFORM_SIGNATURES: tuple[tuple[Platform, str, Callable[[str, FetchResult], bool]], ...] = (
    (Platform.WORDPRESS, "WordPress markers", _is_wordpress),
    (Platform.NEXTJS, "Next.js assets", _is_nextjs),
    (Platform.REACT, "React markers", lambda html, _: bool(_REACT_MARKERS.search(html))),
    (Platform.SHOPIFY, "Shopify", lambda html, _: bool(_SHOPIFY.search(html))),
    (Platform.WIX, "Wix", lambda html, _: bool(_WIX.search(html))),
    (Platform.SQUARESPACE, "Squarespace", lambda html, _: bool(_SQUARESPACE.search(html))),
)


def detect_platform(html: str, result: FetchResult) -> tuple[Platform, str | None]:
    """Return the first matching platform and its indicator label."""
    for platform, label, matches in PLATFORM_SIGNATURES:
        if matches(html, result):
            return platform, label
    return Platform.UNKNOWN, None


def detect_protection(html: str, result: FetchResult) -> list[str]:
    """Reverse-proxy, CDN and bot-policy signals present on the homepage."""
    indicators: list[str] = []
    server = result.header("server").lower()
    x_cache = result.header("x-cache").lower()

    if result.header("x-crawlguard"):
        indicators.append("CrawlGuard header")
    if "noai" in result.header("x-robots-tag").lower():
        indicators.append("X-Robots-Tag noai")
    if _VENDOR_MARKER.search(html):
        indicators.append("CrawlGuard mention")
    if "cloudflare" in server or result.header("cf-ray"):
        indicators.append("Cloudflare")
    if "varnish" in x_cache:
        indicators.append("Varnish")
    if result.header("x-amz-cf-id") or "cloudfront" in x_cache:
        indicators.append("CloudFront")

    return indicators


class TechStackDetector:
    """Fingerprints a site's homepage."""

    def __init__(self, fetcher: Fetcher, timeout: float = 6.0):
        self.fetcher = fetcher
        self.timeout = timeout

    async def detect(self, domain: str) -> TechStackInfo:
        """
        Detect platform and protection for a domain.

        Returns:
            TechStackInfo; ``Unknown`` with no indicators when the homepage
            cannot be fetched
        """
        result = await self.fetcher.fetch(f"https://{domain}/", timeout=self.timeout)
        if result.content is None:
            logger.info("homepage_fetch_failed", domain=domain, error=result.error)
            return TechStackInfo()

        # Error pages still carry server and CDN headers worth reading
        html = result.text
        platform, platform_indicator = detect_platform(html, result)
        protection = detect_protection(html, result)

        indicators = ([platform_indicator] if platform_indicator else []) + protection
        info = TechStackInfo(
            platform=platform,
            has_protection=len(indicators) > 0,
            indicators=indicators,
        )

        logger.info(
            "tech_stack_detected",
            domain=domain,
            platform=platform.value,
            has_protection=info.has_protection,
            indicators=indicators,
        )
        return info
