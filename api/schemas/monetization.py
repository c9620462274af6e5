"""Monetization request and response schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

# bot_requests.content_length is a 32-bit INTEGER column
MAX_CONTENT_LENGTH = 2**31 - 1


class RequestData(BaseModel):
    """The inbound request the plugin is asking about."""

    user_agent: str = Field("", max_length=2000)
    ip_address: str | None = Field(None, max_length=64)
    page_url: str | None = Field(None, max_length=2000)
    content_length: int | None = Field(None, ge=0, le=MAX_CONTENT_LENGTH)
    accept_language: str | None = None
    accept_encoding: str | None = None
    timestamp: datetime | int | None = None


class MonetizeRequest(BaseModel):
    """Body of POST /v1/monetize."""

    api_key: str = Field(..., min_length=1, max_length=100)
    request_data: RequestData


class MonetizeResponse(BaseModel):
    """One allow or paywall decision. Fields not relevant to the action are omitted."""

    action: str = Field(..., description="allow or paywall")
    reason: str | None = None
    revenue: float | None = None
    lost_revenue: float | None = None
    company: str | None = None
    amount: float | None = None
    payment_url: str | None = None
    payment_id: str | None = None
    expires_at: int | None = Field(None, description="Paywall expiry, epoch milliseconds")
