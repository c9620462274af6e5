"""Exposure analyzer schemas."""

from pydantic import BaseModel, Field, field_validator


class AnalyzeRequest(BaseModel):
    """Body of POST /v1/analyzer/analyze."""

    url: str = Field(..., max_length=2000, description="Site URL or bare domain")

    @field_validator("url")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("URL is required")
        return v


class RobotsTxtResult(BaseModel):
    exists: bool
    allows_ai_bots: bool
    blocked_bots: list[str]
    allowed_bots: list[str]
    sitemaps: list[str]


class SitemapResult(BaseModel):
    exists: bool
    page_count: int
    estimated: bool


class TechStackResult(BaseModel):
    platform: str
    has_protection: bool
    indicators: list[str]


class EstimatesResult(BaseModel):
    monthly_bot_requests: int
    bot_traffic_percentage: int
    estimated_monthly_cost: int


class CrawlerAccessResult(BaseModel):
    name: str
    allowed: bool
    company: str


class AnalyzeResponse(BaseModel):
    """Exposure report for one domain."""

    domain: str
    risk_score: str = Field(..., description="low, medium, high or critical")
    robots_txt: RobotsTxtResult
    sitemap: SitemapResult
    tech_stack: TechStackResult
    estimates: EstimatesResult
    ai_crawlers: list[CrawlerAccessResult]
