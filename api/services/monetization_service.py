"""Monetization decision for a single classified request.

Exactly one action comes out of every decision:

1. not an AI bot                    -> Allow(not_ai_bot)
2. site has monetization disabled   -> Allow(monetization_disabled, lost_revenue=price)
3. bot type on the site allow-list  -> Allow(bot_whitelisted)
4. company holds a subscription     -> Allow(subscription_active, revenue=price), revenue recorded
5. otherwise                        -> Paywall(amount=price, payment_url, payment_id, expires_at)

Payment provider failures propagate; a request is never let through because
the payment could not be created.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any, Protocol

import structlog

from api.metrics import record_decision, record_revenue
from api.models import RevenueSource, Site
from api.services.payment_service import PaymentIntent
from api.services.pricing import PricingEngine
from worker.detection.classifier import BotClassification

logger = structlog.get_logger(__name__)

DEFAULT_PAYWALL_EXPIRY = timedelta(minutes=15)


class AllowReason(StrEnum):
    """Why a request was let through."""

    NOT_AI_BOT = "not_ai_bot"
    MONETIZATION_DISABLED = "monetization_disabled"
    BOT_WHITELISTED = "bot_whitelisted"
    SUBSCRIPTION_ACTIVE = "subscription_active"


@dataclass(frozen=True)
class Allow:
    """Serve the content."""

    reason: AllowReason
    revenue: float | None = None
    lost_revenue: float | None = None
    company: str | None = None

    action = "allow"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"action": self.action, "reason": self.reason.value}
        if self.revenue is not None:
            data["revenue"] = self.revenue
        if self.lost_revenue is not None:
            data["lost_revenue"] = self.lost_revenue
        if self.company is not None:
            data["company"] = self.company
        return data


@dataclass(frozen=True)
class Paywall:
    """Withhold the content until the payment at ``payment_url`` completes."""

    amount: float
    payment_url: str
    payment_id: str
    expires_at: datetime

    action = "paywall"

    @property
    def expires_at_ms(self) -> int:
        return int(self.expires_at.timestamp() * 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "amount": self.amount,
            "payment_url": self.payment_url,
            "payment_id": self.payment_id,
            "expires_at": self.expires_at_ms,
        }


MonetizationAction = Allow | Paywall


class SubscriptionStore(Protocol):
    """Subscription lookup and revenue recording."""

    async def has_active_subscription(self, company: str) -> bool:
        """Whether the company holds an unexpired subscription."""
        ...

    async def record_revenue(
        self,
        site_id: uuid.UUID,
        company: str | None,
        amount: float,
        source: RevenueSource,
    ) -> Any:
        """Credit revenue to a site."""
        ...


class PaymentProvider(Protocol):
    """Creates payment demands."""

    async def create_payment_intent(
        self,
        site: Site,
        amount: float,
        metadata: dict[str, str],
    ) -> PaymentIntent:
        """Create a payment; raises PaymentProviderError on failure."""
        ...


class MonetizationDecisionMachine:
    """Decides what to do with one classified request for one site."""

    def __init__(
        self,
        store: SubscriptionStore,
        payment_provider: PaymentProvider,
        pricing: PricingEngine | None = None,
        paywall_expiry: timedelta = DEFAULT_PAYWALL_EXPIRY,
        now: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.payment_provider = payment_provider
        self.pricing = pricing or PricingEngine()
        self.paywall_expiry = paywall_expiry
        self._now = now or (lambda: datetime.now(UTC))

    async def decide(
        self,
        site: Site,
        classification: BotClassification,
        content_length: int | None = None,
        page_url: str | None = None,
        user_agent: str | None = None,
        request_id: uuid.UUID | None = None,
    ) -> MonetizationAction:
        """
        Decide the action for a request.

        ``request_id`` is the id the request will be logged under; it travels
        in the payment metadata so settlement can find the request again.

        Raises:
            PaymentProviderError: If a paywall is due but no payment could be created
        """
        action = await self._decide(
            site, classification, content_length, page_url, user_agent, request_id
        )

        reason = action.reason.value if isinstance(action, Allow) else "payment_required"
        record_decision(action.action, reason)
        return action

    async def _decide(
        self,
        site: Site,
        classification: BotClassification,
        content_length: int | None,
        page_url: str | None,
        user_agent: str | None,
        request_id: uuid.UUID | None,
    ) -> MonetizationAction:
        if not classification.is_ai_bot:
            return Allow(reason=AllowReason.NOT_AI_BOT)

        price = self.pricing.price(classification, site.pricing_per_request, content_length)

        if not site.monetization_enabled:
            return Allow(reason=AllowReason.MONETIZATION_DISABLED, lost_revenue=price)

        if classification.bot_type and classification.bot_type in _allow_list(site):
            return Allow(reason=AllowReason.BOT_WHITELISTED)

        company = classification.bot_company
        if company and await self.store.has_active_subscription(company):
            await self.store.record_revenue(
                site_id=site.id,
                company=company,
                amount=price,
                source=RevenueSource.SUBSCRIPTION,
            )
            record_revenue(RevenueSource.SUBSCRIPTION.value, price)
            logger.info(
                "subscription_access_granted",
                site_id=str(site.id),
                company=company,
                revenue=price,
            )
            return Allow(reason=AllowReason.SUBSCRIPTION_ACTIVE, revenue=price, company=company)

        metadata = {
            "bot_type": classification.bot_type or "unknown",
            "company": company or "",
            "page_url": page_url or "",
            "user_agent": user_agent or "",
        }
        if request_id is not None:
            metadata["request_id"] = str(request_id)
        intent = await self.payment_provider.create_payment_intent(site, price, metadata)

        logger.info(
            "paywall_issued",
            site_id=str(site.id),
            company=company,
            amount=price,
            payment_id=intent.id,
        )
        return Paywall(
            amount=price,
            payment_url=intent.url,
            payment_id=intent.id,
            expires_at=self._now() + self.paywall_expiry,
        )


def _allow_list(site: Site) -> set[str]:
    return {bot.lower() for bot in (site.allowed_bots or [])}
