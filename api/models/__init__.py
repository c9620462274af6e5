"""SQLAlchemy models package."""

from api.models.billing import (
    AICompanySubscription,
    Payment,
    PaymentStatus,
    RevenueEvent,
    RevenueSource,
    SubscriptionStatus,
)
from api.models.bot_request import BotAction, BotRequest
from api.models.site import DEFAULT_PRICE_PER_REQUEST, Site, SubscriptionTier

__all__ = [
    # Site
    "Site",
    "SubscriptionTier",
    "DEFAULT_PRICE_PER_REQUEST",
    # Bot requests
    "BotRequest",
    "BotAction",
    # Billing
    "AICompanySubscription",
    "SubscriptionStatus",
    "RevenueEvent",
    "RevenueSource",
    "Payment",
    "PaymentStatus",
]
