"""Bot request event log."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from api.database import Base

if TYPE_CHECKING:
    from api.models.site import Site


class BotAction(StrEnum):
    """What was done with a request."""

    ALLOWED = "allowed"
    PAYWALL = "paywall"
    MONETIZED = "monetized"


class BotRequest(Base):
    """One classified request. Append-only apart from settlement marking it monetized."""

    __tablename__ = "bot_requests"
    __table_args__ = (
        # Hourly rate-limit window and analytics both scan by site and time
        Index("ix_bot_requests_site_created", "site_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    site_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("sites.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Request
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str] = mapped_column(Text, nullable=False, default="")
    page_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_length: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Classification
    is_ai_bot: Mapped[bool] = mapped_column(default=False, nullable=False)
    bot_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bot_company: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    confidence: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Decision
    action_taken: Mapped[str] = mapped_column(String(20), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(50), nullable=True)
    revenue_amount: Mapped[float] = mapped_column(
        Numeric(12, 6, asdecimal=False), default=0.0, nullable=False
    )
    lost_revenue: Mapped[float] = mapped_column(
        Numeric(12, 6, asdecimal=False), default=0.0, nullable=False
    )
    payment_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    processing_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    site: Mapped[Site] = relationship("Site", back_populates="bot_requests")
