"""Stripe payments: paywall checkout creation and webhook settlement."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

import stripe
import structlog

from api.config import Settings
from api.exceptions import PaymentProviderError
from api.metrics import record_revenue
from api.models import Payment, RevenueSource, Site
from api.services.site_service import SiteService

logger = structlog.get_logger(__name__)

# Stripe card pricing (US): 2.9% + $0.30
STRIPE_PERCENT_FEE = 0.029
STRIPE_FIXED_FEE = 0.30

MAX_METADATA_VALUE_LENGTH = 500


@dataclass(frozen=True)
class PaymentIntent:
    """A payment demand the bot operator can complete at ``url``."""

    id: str
    url: str


@dataclass(frozen=True)
class FeeSplit:
    """How a settled payment is divided."""

    amount: float
    stripe_fee: float
    platform_fee: float
    creator_payout: float


def to_cents(amount: float) -> int:
    """Stripe amounts are integer cents; never charge less than one."""
    return max(1, round(amount * 100))


def calculate_fee_split(amount: float, platform_fee_rate: float = 0.20) -> FeeSplit:
    """Split a payment into processor fee, platform fee and creator payout."""
    stripe_fee = round(amount * STRIPE_PERCENT_FEE + STRIPE_FIXED_FEE, 6)
    platform_fee = round(amount * platform_fee_rate, 6)
    # Micro-payments can cost more to process than they bring in
    creator_payout = round(max(0.0, amount - stripe_fee - platform_fee), 6)
    return FeeSplit(
        amount=amount,
        stripe_fee=stripe_fee,
        platform_fee=platform_fee,
        creator_payout=creator_payout,
    )


class StripePaymentProvider:
    """Creates one-off Checkout sessions for paywalled requests."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def create_payment_intent(
        self,
        site: Site,
        amount: float,
        metadata: dict[str, str],
    ) -> PaymentIntent:
        """
        Create a payment demand for ``amount`` dollars.

        Raises:
            PaymentProviderError: If Stripe is not configured or rejects the request
        """
        if not self.settings.stripe_secret_key:
            raise PaymentProviderError("Payment provider not configured")

        stripe.api_key = self.settings.stripe_secret_key

        clean_metadata = {
            key: str(value)[:MAX_METADATA_VALUE_LENGTH]
            for key, value in {**metadata, "site_id": str(site.id)}.items()
            if value is not None
        }

        try:
            session = stripe.checkout.Session.create(
                mode="payment",
                line_items=[
                    {
                        "price_data": {
                            "currency": self.settings.stripe_currency,
                            "unit_amount": to_cents(amount),
                            "product_data": {"name": f"Content access: {site.site_url}"},
                        },
                        "quantity": 1,
                    }
                ],
                success_url=self.settings.payment_success_url,
                cancel_url=self.settings.payment_cancel_url,
                metadata=clean_metadata,
                payment_intent_data={"metadata": clean_metadata},
            )
        except stripe.StripeError as e:
            logger.error("stripe_payment_intent_failed", site_id=str(site.id), error=str(e))
            raise PaymentProviderError("Failed to create payment") from e

        logger.info(
            "payment_intent_created",
            site_id=str(site.id),
            payment_id=session.id,
            amount=amount,
        )
        return PaymentIntent(id=session.id, url=session.url or "")


class PaymentSettlementService:
    """Books a succeeded payment and pays the site owner their share."""

    def __init__(self, site_service: SiteService, settings: Settings):
        self.site_service = site_service
        self.settings = settings

    async def settle(self, payment_intent: dict[str, Any]) -> Payment | None:
        """
        Settle a ``payment_intent.succeeded`` object.

        Returns:
            The recorded Payment, or None when the event was already settled
            or does not belong to a known site
        """
        intent_id = payment_intent.get("id", "")
        metadata = payment_intent.get("metadata") or {}

        site_id = _parse_uuid(metadata.get("site_id"))
        if site_id is None:
            logger.warning("payment_settlement_no_site", payment_intent_id=intent_id)
            return None

        site = await self.site_service.get_site(site_id)
        if site is None:
            logger.warning(
                "payment_settlement_unknown_site",
                payment_intent_id=intent_id,
                site_id=str(site_id),
            )
            return None

        if await self.site_service.get_payment(intent_id) is not None:
            logger.info("payment_already_settled", payment_intent_id=intent_id)
            return None

        cents = payment_intent.get("amount_received") or payment_intent.get("amount") or 0
        amount = int(cents) / 100
        split = calculate_fee_split(amount, self.settings.platform_fee_rate)

        payment = await self.site_service.record_payment(
            site_id=site.id,
            payment_intent_id=intent_id,
            currency=payment_intent.get("currency") or self.settings.stripe_currency,
            split=split,
            metadata=metadata,
        )
        await self.site_service.record_revenue(
            site_id=site.id,
            company=metadata.get("company"),
            amount=amount,
            source=RevenueSource.PAYMENT,
            payment_intent_id=intent_id,
        )
        request_id = _parse_uuid(metadata.get("request_id"))
        if request_id is not None:
            await self.site_service.mark_request_monetized(
                site_id=site.id,
                request_id=request_id,
                amount=amount,
            )
        record_revenue(RevenueSource.PAYMENT.value, amount)

        payment.transfer_id = self._transfer_payout(site, split.creator_payout)

        logger.info(
            "payment_settled",
            payment_intent_id=intent_id,
            site_id=str(site.id),
            amount=amount,
            creator_payout=split.creator_payout,
        )
        return payment

    def _transfer_payout(self, site: Site, payout: float) -> str | None:
        """Transfer the creator's share; failures are logged and left for manual payout."""
        if not site.stripe_account_id:
            logger.info("payout_deferred_no_account", site_id=str(site.id))
            return None
        cents = round(payout * 100)
        if cents < 1 or not self.settings.stripe_secret_key:
            return None

        stripe.api_key = self.settings.stripe_secret_key
        try:
            transfer = stripe.Transfer.create(
                amount=cents,
                currency=self.settings.stripe_currency,
                destination=site.stripe_account_id,
                metadata={"site_id": str(site.id), "type": "creator_payout"},
            )
        except stripe.StripeError as e:
            logger.error("payout_transfer_failed", site_id=str(site.id), error=str(e))
            return None

        logger.info("payout_transferred", site_id=str(site.id), transfer_id=transfer.id)
        return transfer.id


def _parse_uuid(value: str | None) -> uuid.UUID | None:
    try:
        return uuid.UUID(value or "")
    except ValueError:
        return None
