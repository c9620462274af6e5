"""Site analytics schemas."""

from pydantic import BaseModel, Field


class CompanyStats(BaseModel):
    """Requests and revenue attributed to one AI company."""

    company: str
    requests: int
    revenue: float


class AnalyticsResponse(BaseModel):
    """Totals for a site over a trailing window."""

    days: int = Field(..., description="Window length in days")
    total_requests: int
    ai_bot_requests: int
    paywalls_issued: int
    monetized_requests: int
    revenue: float
    lost_revenue: float
    top_companies: list[CompanyStats] = Field(default_factory=list)
