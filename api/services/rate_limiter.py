"""Per-site hourly request caps."""

from __future__ import annotations

from dataclasses import dataclass

from api.models.site import SubscriptionTier

DEFAULT_TIER_LIMITS: dict[str, int] = {
    SubscriptionTier.FREE.value: 100,
    SubscriptionTier.PRO.value: 1000,
    SubscriptionTier.BUSINESS.value: 5000,
}


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of checking a site's trailing-hour request count."""

    allowed: bool
    limit: int
    current: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.current)


class RateLimiter:
    """
    Caps requests per site per trailing hour by subscription tier.

    Holds no counters: the hourly count is read from the bot request log by
    the caller, so every API process sees the same window.
    """

    def __init__(self, tier_limits: dict[str, int] | None = None):
        self.tier_limits = dict(tier_limits or DEFAULT_TIER_LIMITS)

    def limit_for(self, tier: str | None) -> int:
        """Cap for a tier; unknown tiers get the free cap."""
        free = self.tier_limits.get(SubscriptionTier.FREE.value, 100)
        if tier is None:
            return free
        return self.tier_limits.get(tier, free)

    def check(self, tier: str | None, hourly_count: int) -> RateLimitDecision:
        limit = self.limit_for(tier)
        return RateLimitDecision(
            allowed=hourly_count < limit,
            limit=limit,
            current=hourly_count,
        )
