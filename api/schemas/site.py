"""Site registration schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class SiteRegister(BaseModel):
    """Body of POST /v1/sites/register."""

    site_url: str = Field(..., max_length=500)
    site_name: str | None = Field(None, max_length=255)
    admin_email: EmailStr | None = None

    @field_validator("site_url")
    @classmethod
    def require_http_url(cls, v: str) -> str:
        """Require an http(s) URL and drop the trailing slash."""
        v = v.strip()
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError("site_url must start with http:// or https://")
        return v.rstrip("/")


class SiteRegistered(BaseModel):
    """A newly registered site and its API key (shown once)."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    site_url: str
    site_name: str | None
    api_key: str
    subscription_tier: str
    monetization_enabled: bool
    pricing_per_request: float
    created_at: datetime
