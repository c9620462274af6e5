"""Health, readiness, status and metrics endpoints."""

import time
from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Response
from pydantic import BaseModel, Field
from sqlalchemy import text

from api.config import get_settings
from api.database import get_session_maker
from api.deps import RegistryDep
from api.metrics import get_metrics, get_metrics_content_type

router = APIRouter(tags=["Health"])
logger = structlog.get_logger()

VERSION = "0.1.0"

# Track server start time for uptime calculation
_server_start_time = time.time()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Health status: healthy, degraded, unhealthy")
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    version: str = Field(..., description="API version")
    uptime_seconds: int = Field(..., description="Server uptime in seconds")


class DependencyCheck(BaseModel):
    """Individual dependency check result."""

    status: str = Field(..., description="Status: healthy, unhealthy")
    latency_ms: float | None = Field(None, description="Check latency in milliseconds")
    error: str | None = Field(None, description="Error message if unhealthy")


class ReadyResponse(HealthResponse):
    """Readiness check response with dependency status."""

    checks: dict[str, DependencyCheck] = Field(..., description="Individual dependency checks")


class StatusResponse(BaseModel):
    """Which integrations this deployment has configured."""

    service: str
    version: str
    env: str
    payments_enabled: bool
    webhooks_enabled: bool
    error_tracking_enabled: bool
    sample_crawl_enabled: bool
    known_crawlers: int


def _uptime() -> int:
    return int(time.time() - _server_start_time)


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns healthy if the API is running. Use /ready for dependency checks.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC).isoformat(),
        version=VERSION,
        uptime_seconds=_uptime(),
    )


@router.get("/ready", response_model=ReadyResponse)
async def readiness_check(response: Response) -> ReadyResponse:
    """Readiness check: database connectivity and latency."""
    checks: dict[str, DependencyCheck] = {}
    overall_status = "healthy"

    try:
        start = time.perf_counter()
        async with get_session_maker()() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = DependencyCheck(
            status="healthy",
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
    except Exception as e:
        logger.warning("database_health_check_failed", error=str(e))
        checks["database"] = DependencyCheck(status="unhealthy", error=str(e))
        overall_status = "unhealthy"
        response.status_code = 503

    return ReadyResponse(
        status=overall_status,
        timestamp=datetime.now(UTC).isoformat(),
        version=VERSION,
        uptime_seconds=_uptime(),
        checks=checks,
    )


@router.get("/status", response_model=StatusResponse)
async def service_status(registry: RegistryDep) -> StatusResponse:
    """Configuration status of the service."""
    settings = get_settings()
    return StatusResponse(
        service="crawltoll",
        version=VERSION,
        env=settings.env,
        payments_enabled=settings.stripe_enabled,
        webhooks_enabled=bool(settings.stripe_webhook_secret),
        error_tracking_enabled=bool(settings.sentry_dsn),
        sample_crawl_enabled=settings.sample_crawl_enabled,
        known_crawlers=len(registry),
    )


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus scrape endpoint."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())
