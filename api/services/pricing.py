"""Per-request pricing for AI crawler access."""

from __future__ import annotations

from worker.detection.classifier import BotClassification

# Prices are quoted per 1000 bytes of content served
CONTENT_UNIT_BYTES = 1000
PRICE_DECIMALS = 6


class PricingEngine:
    """Prices one request from the bot's rate, the site's floor and the content size."""

    def __init__(self, default_rate: float = 0.001):
        self.default_rate = default_rate

    def price(
        self,
        classification: BotClassification,
        site_price: float,
        content_length: int | None = None,
    ) -> float:
        """
        Price a request.

        The base rate is the larger of the bot's suggested rate and the site's
        configured price; it is scaled by content size in 1000-byte units, never
        below one unit.
        """
        bot_rate = classification.suggested_rate or self.default_rate
        base = max(bot_rate, float(site_price or 0))

        multiplier = 1.0
        if content_length:
            multiplier = max(1.0, content_length / CONTENT_UNIT_BYTES)

        return round(base * multiplier, PRICE_DECIMALS)
