"""Site persistence: API-key lookup, the bot request log, revenue and payments."""

from __future__ import annotations

import secrets
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.exceptions import ConflictError
from api.metrics import record_site_registered
from api.models import (
    DEFAULT_PRICE_PER_REQUEST,
    AICompanySubscription,
    BotAction,
    BotRequest,
    Payment,
    PaymentStatus,
    RevenueEvent,
    RevenueSource,
    Site,
    SubscriptionStatus,
    SubscriptionTier,
)
from api.schemas.analytics import AnalyticsResponse, CompanyStats

if TYPE_CHECKING:
    from api.services.payment_service import FeeSplit

logger = structlog.get_logger(__name__)

API_KEY_PREFIX = "cg_"
RATE_WINDOW = timedelta(hours=1)


def generate_api_key() -> str:
    """``cg_`` followed by 64 hex characters."""
    return API_KEY_PREFIX + secrets.token_hex(32)


@dataclass
class SiteContext:
    """An authenticated site and its request count over the trailing hour."""

    site: Site
    hourly_request_count: int


class SiteService:
    """Database operations behind the monetization and settlement paths."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Sites

    async def get_site(self, site_id: uuid.UUID) -> Site | None:
        result = await self.db.execute(select(Site).where(Site.id == site_id))
        return result.scalar_one_or_none()

    async def get_site_by_api_key(
        self, api_key: str, now: datetime | None = None
    ) -> SiteContext | None:
        """Look up an active site by API key, with its trailing-hour request count."""
        result = await self.db.execute(
            select(Site).where(Site.api_key == api_key, Site.active.is_(True))
        )
        site = result.scalar_one_or_none()
        if site is None:
            return None

        count = await self.hourly_request_count(site.id, now)
        return SiteContext(site=site, hourly_request_count=count)

    async def hourly_request_count(self, site_id: uuid.UUID, now: datetime | None = None) -> int:
        since = (now or datetime.now(UTC)) - RATE_WINDOW
        result = await self.db.execute(
            select(func.count())
            .select_from(BotRequest)
            .where(BotRequest.site_id == site_id, BotRequest.created_at >= since)
        )
        return int(result.scalar_one())

    async def register_site(
        self,
        site_url: str,
        site_name: str | None = None,
        admin_email: str | None = None,
    ) -> Site:
        """
        Register a site and issue its API key.

        Raises:
            ConflictError: If the URL is already registered
        """
        site_url = site_url.rstrip("/")
        existing = await self.db.execute(select(Site.id).where(Site.site_url == site_url))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(f"Site '{site_url}' is already registered")

        site = Site(
            site_url=site_url,
            site_name=site_name,
            admin_email=admin_email,
            api_key=generate_api_key(),
            active=True,
            monetization_enabled=False,
            pricing_per_request=DEFAULT_PRICE_PER_REQUEST,
            allowed_bots=[],
            subscription_tier=SubscriptionTier.FREE.value,
        )
        self.db.add(site)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # A concurrent registration won the unique constraint
            await self.db.rollback()
            raise ConflictError(f"Site '{site_url}' is already registered") from e
        await self.db.refresh(site)

        record_site_registered()
        logger.info("site_registered", site_id=str(site.id), site_url=site_url)
        return site

    # Bot request log

    async def log_bot_request(self, site_id: uuid.UUID, **fields: Any) -> BotRequest:
        """Append one classified request to the log."""
        bot_request = BotRequest(site_id=site_id, **fields)
        self.db.add(bot_request)
        await self.db.flush()
        return bot_request

    async def mark_request_monetized(
        self,
        site_id: uuid.UUID,
        request_id: uuid.UUID,
        amount: float,
    ) -> BotRequest | None:
        """Mark the paywalled request a settled payment was issued for as monetized."""
        result = await self.db.execute(
            select(BotRequest).where(
                BotRequest.id == request_id,
                BotRequest.site_id == site_id,
                BotRequest.action_taken == BotAction.PAYWALL.value,
            )
        )
        bot_request = result.scalar_one_or_none()
        if bot_request is None:
            logger.info(
                "settlement_request_not_found",
                site_id=str(site_id),
                request_id=str(request_id),
            )
            return None

        bot_request.action_taken = BotAction.MONETIZED.value
        bot_request.revenue_amount = amount
        await self.db.flush()
        return bot_request

    # Subscriptions and revenue

    async def has_active_subscription(self, company: str, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        result = await self.db.execute(
            select(AICompanySubscription.id)
            .where(
                AICompanySubscription.company == company,
                AICompanySubscription.status == SubscriptionStatus.ACTIVE.value,
                or_(
                    AICompanySubscription.current_period_end.is_(None),
                    AICompanySubscription.current_period_end > now,
                ),
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def record_revenue(
        self,
        site_id: uuid.UUID,
        company: str | None,
        amount: float,
        source: RevenueSource,
        payment_intent_id: str | None = None,
    ) -> RevenueEvent:
        event = RevenueEvent(
            site_id=site_id,
            company=company,
            amount=amount,
            source=source.value,
            payment_intent_id=payment_intent_id,
        )
        self.db.add(event)
        await self.db.flush()

        logger.debug(
            "revenue_recorded",
            site_id=str(site_id),
            company=company,
            amount=amount,
            source=source.value,
        )
        return event

    # Payments

    async def get_payment(self, payment_intent_id: str) -> Payment | None:
        result = await self.db.execute(
            select(Payment).where(Payment.payment_intent_id == payment_intent_id)
        )
        return result.scalar_one_or_none()

    async def record_payment(
        self,
        site_id: uuid.UUID,
        payment_intent_id: str,
        currency: str,
        split: FeeSplit,
        metadata: dict[str, Any] | None = None,
    ) -> Payment:
        """Record a succeeded payment with its fee split."""
        payment = Payment(
            site_id=site_id,
            payment_intent_id=payment_intent_id,
            amount=split.amount,
            currency=currency,
            status=PaymentStatus.SUCCEEDED.value,
            stripe_fee=split.stripe_fee,
            platform_fee=split.platform_fee,
            creator_payout=split.creator_payout,
            extra_data=metadata,
        )
        self.db.add(payment)
        await self.db.flush()
        return payment

    # Analytics

    async def analytics_summary(
        self, site_id: uuid.UUID, days: int = 30, now: datetime | None = None
    ) -> AnalyticsResponse:
        """Request, paywall and revenue totals for a site over the last ``days``."""
        since = (now or datetime.now(UTC)) - timedelta(days=days)
        window = and_(BotRequest.site_id == site_id, BotRequest.created_at >= since)

        totals = await self.db.execute(
            select(
                func.count(),
                func.count().filter(BotRequest.is_ai_bot.is_(True)),
                func.count().filter(BotRequest.action_taken == BotAction.PAYWALL.value),
                func.count().filter(BotRequest.action_taken == BotAction.MONETIZED.value),
                func.coalesce(func.sum(BotRequest.lost_revenue), 0.0),
            ).where(window)
        )
        total, ai_bots, paywalls, monetized, lost_revenue = totals.one()

        revenue_result = await self.db.execute(
            select(func.coalesce(func.sum(RevenueEvent.amount), 0.0)).where(
                RevenueEvent.site_id == site_id, RevenueEvent.created_at >= since
            )
        )
        revenue = revenue_result.scalar_one()

        companies_result = await self.db.execute(
            select(
                BotRequest.bot_company,
                func.count().label("requests"),
                func.coalesce(func.sum(BotRequest.revenue_amount), 0.0).label("revenue"),
            )
            .where(window, BotRequest.is_ai_bot.is_(True), BotRequest.bot_company.is_not(None))
            .group_by(BotRequest.bot_company)
            .order_by(func.count().desc())
            .limit(10)
        )
        top_companies = [
            CompanyStats(company=company, requests=requests, revenue=round(float(rev), 6))
            for company, requests, rev in companies_result.all()
        ]

        return AnalyticsResponse(
            days=days,
            total_requests=total,
            ai_bot_requests=ai_bots,
            paywalls_issued=paywalls,
            monetized_requests=monetized,
            revenue=round(float(revenue), 6),
            lost_revenue=round(float(lost_revenue), 6),
            top_companies=top_companies,
        )
