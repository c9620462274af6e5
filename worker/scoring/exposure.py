"""Exposure estimate and risk score for AI crawler traffic.

Pure functions over the analyzer outputs. The traffic multipliers and the
cost-per-thousand figure are rough industry heuristics, kept as parameters
so they can be tuned without touching the formulas.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from worker.crawler.sitemap import round_half_up

# Monthly crawler requests per exposed page
NEWS_MULTIPLIER = 3.0
LARGE_SITE_MULTIPLIER = 1.8
MEDIUM_SITE_MULTIPLIER = 1.3
BASE_MULTIPLIER = 1.0

LARGE_SITE_PAGES = 10_000
MEDIUM_SITE_PAGES = 1_000
SMALL_SITE_PAGES = 100

# Share of traffic that is AI crawlers, by robots.txt stance
OPEN_BOT_TRAFFIC_PERCENTAGE = 35
CLOSED_BOT_TRAFFIC_PERCENTAGE = 10

DEFAULT_COST_PER_THOUSAND = 0.5

_NEWS_PATTERN = re.compile(r"news|latest", re.IGNORECASE)


class RiskScore(StrEnum):
    """How much unmonetized AI crawler exposure a site has."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ExposureEstimate:
    """Projected monthly AI crawler load and what it costs the site."""

    monthly_bot_requests: int
    bot_traffic_percentage: int
    estimated_monthly_cost: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "monthly_bot_requests": self.monthly_bot_requests,
            "bot_traffic_percentage": self.bot_traffic_percentage,
            "estimated_monthly_cost": self.estimated_monthly_cost,
        }


def has_news_signals(sitemap_urls: list[str]) -> bool:
    """A news or latest-content sitemap means frequent recrawls."""
    return any(_NEWS_PATTERN.search(url) for url in sitemap_urls)


def traffic_multiplier(page_count: int, news: bool = False) -> float:
    if news:
        return NEWS_MULTIPLIER
    if page_count > LARGE_SITE_PAGES:
        return LARGE_SITE_MULTIPLIER
    if page_count > MEDIUM_SITE_PAGES:
        return MEDIUM_SITE_MULTIPLIER
    return BASE_MULTIPLIER


def estimate_exposure(
    page_count: int,
    allows_ai_bots: bool,
    sitemap_urls: list[str] | None = None,
    cost_per_thousand: float = DEFAULT_COST_PER_THOUSAND,
) -> ExposureEstimate:
    """
    Estimate monthly AI crawler requests and their cost.

    Args:
        page_count: Pages the site exposes (non-negative)
        allows_ai_bots: Whether robots.txt leaves any AI crawler in
        sitemap_urls: Sitemap URLs declared in robots.txt, checked for news signals
        cost_per_thousand: Dollars of value per thousand crawler requests

    Returns:
        ExposureEstimate with whole-number figures
    """
    pages = max(0, page_count)
    multiplier = traffic_multiplier(pages, has_news_signals(sitemap_urls or []))
    monthly_requests = round_half_up(pages * multiplier)

    return ExposureEstimate(
        monthly_bot_requests=monthly_requests,
        bot_traffic_percentage=(
            OPEN_BOT_TRAFFIC_PERCENTAGE if allows_ai_bots else CLOSED_BOT_TRAFFIC_PERCENTAGE
        ),
        estimated_monthly_cost=round_half_up(monthly_requests / 1000 * cost_per_thousand),
    )


def risk_points(allows_ai_bots: bool, page_count: int, has_protection: bool) -> int:
    points = 0
    if allows_ai_bots:
        points += 3

    if page_count > LARGE_SITE_PAGES:
        points += 3
    elif page_count > MEDIUM_SITE_PAGES:
        points += 2
    elif page_count > SMALL_SITE_PAGES:
        points += 1

    if not has_protection:
        points += 2
    return points


def calculate_risk_score(allows_ai_bots: bool, page_count: int, has_protection: bool) -> RiskScore:
    """Bucket the risk points; only an open, large, unprotected site is critical."""
    points = risk_points(allows_ai_bots, page_count, has_protection)
    if points >= 7:
        return RiskScore.CRITICAL
    if points >= 5:
        return RiskScore.HIGH
    if points >= 3:
        return RiskScore.MEDIUM
    return RiskScore.LOW
