"""Business logic services package."""

from api.services.site_service import SiteContext, SiteService
from api.services.payment_service import (
    PaymentIntent,
    PaymentSettlementService,
    StripePaymentProvider,
)
from api.services.pricing import PricingEngine
from api.services.rate_limiter import RateLimitDecision, RateLimiter
from api.services.monetization_service import (
    Allow,
    MonetizationAction,
    MonetizationDecisionMachine,
    Paywall,
)

__all__ = [
    "SiteContext",
    "SiteService",
    "PaymentIntent",
    "PaymentSettlementService",
    "StripePaymentProvider",
    "PricingEngine",
    "RateLimitDecision",
    "RateLimiter",
    "Allow",
    "MonetizationAction",
    "MonetizationDecisionMachine",
    "Paywall",
]
