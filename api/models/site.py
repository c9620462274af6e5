"""Site model."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from api.database import Base

if TYPE_CHECKING:
    from api.models.bot_request import BotRequest


class SubscriptionTier(StrEnum):
    """Site plan; sets the hourly request cap."""

    FREE = "free"
    PRO = "pro"
    BUSINESS = "business"


DEFAULT_PRICE_PER_REQUEST = 0.001


class Site(Base):
    """A website protected by crawltoll, identified by its API key."""

    __tablename__ = "sites"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Site info
    site_url: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    site_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    admin_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    api_key: Mapped[str] = mapped_column(String(67), nullable=False, unique=True, index=True)
    active: Mapped[bool] = mapped_column(default=True, nullable=False)

    # Monetization
    monetization_enabled: Mapped[bool] = mapped_column(default=False, nullable=False)
    pricing_per_request: Mapped[float] = mapped_column(
        Numeric(12, 6, asdecimal=False),
        default=DEFAULT_PRICE_PER_REQUEST,
        nullable=False,
    )
    # Bot types (lower-cased user-agent tokens) let through for free
    allowed_bots: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)
    subscription_tier: Mapped[str] = mapped_column(
        String(20),
        default=SubscriptionTier.FREE.value,
        nullable=False,
    )

    # Connected account receiving payouts
    stripe_account_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Timestamps
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

    # Relationships
    bot_requests: Mapped[list[BotRequest]] = relationship(
        "BotRequest",
        back_populates="site",
        cascade="all, delete-orphan",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<Site {self.site_url}>"
