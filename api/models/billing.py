"""AI company subscriptions, revenue events and settled payments."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, ForeignKey, Numeric, String, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from api.database import Base


class SubscriptionStatus(StrEnum):
    """AI company subscription status."""

    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"


class RevenueSource(StrEnum):
    """Where recorded revenue came from."""

    SUBSCRIPTION = "subscription"
    PAYMENT = "payment"


class PaymentStatus(StrEnum):
    """Settlement status of a paywall payment."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


class AICompanySubscription(Base):
    """Blanket access an AI company has paid for."""

    __tablename__ = "ai_company_subscriptions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    company: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(50), default=SubscriptionStatus.ACTIVE.value, nullable=False
    )
    stripe_subscription_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True
    )
    # None means open-ended
    current_period_end: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class RevenueEvent(Base):
    """Revenue credited to a site."""

    __tablename__ = "revenue_events"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    site_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("sites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    company: Mapped[str | None] = mapped_column(String(100), nullable=True)
    amount: Mapped[float] = mapped_column(Numeric(12, 6, asdecimal=False), nullable=False)
    source: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_intent_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )


class Payment(Base):
    """A settled paywall payment and how it was split."""

    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    site_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("sites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payment_intent_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    amount: Mapped[float] = mapped_column(Numeric(12, 6, asdecimal=False), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="usd", nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=PaymentStatus.SUCCEEDED.value, nullable=False
    )

    # Split
    stripe_fee: Mapped[float] = mapped_column(Numeric(12, 6, asdecimal=False), nullable=False)
    platform_fee: Mapped[float] = mapped_column(Numeric(12, 6, asdecimal=False), nullable=False)
    creator_payout: Mapped[float] = mapped_column(
        Numeric(12, 6, asdecimal=False), nullable=False
    )
    transfer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    extra_data: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
