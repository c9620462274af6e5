"""Prometheus metrics for monitoring and observability."""

from __future__ import annotations

import re
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

# Request metrics
REQUEST_COUNT = Counter(
    "crawltoll_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_LATENCY = Histogram(
    "crawltoll_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

REQUEST_IN_PROGRESS = Gauge(
    "crawltoll_http_requests_in_progress",
    "HTTP requests currently being processed",
    ["method", "endpoint"],
)

# Error metrics
ERROR_COUNT = Counter(
    "crawltoll_errors_total",
    "Total application errors",
    ["error_type", "endpoint"],
)

# Business metrics
BOT_DECISIONS_TOTAL = Counter(
    "crawltoll_bot_decisions_total",
    "Monetization decisions by action and reason",
    ["action", "reason"],
)

AI_BOT_DETECTIONS_TOTAL = Counter(
    "crawltoll_ai_bot_detections_total",
    "Requests classified as AI crawlers",
    ["company"],
)

REVENUE_TOTAL = Counter(
    "crawltoll_revenue_usd_total",
    "Revenue recorded in USD",
    ["source"],
)

ANALYZER_RUNS_TOTAL = Counter(
    "crawltoll_analyzer_runs_total",
    "Exposure analyses completed",
    ["risk_score"],
)

SITES_REGISTERED_TOTAL = Counter(
    "crawltoll_sites_registered_total",
    "Sites registered",
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    metrics: bytes = generate_latest()
    return metrics


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    content_type: str = CONTENT_TYPE_LATEST
    return content_type


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect request metrics."""

    # Paths to exclude from metrics
    EXCLUDE_PATHS = {"/metrics", "/health", "/ready", "/favicon.ico"}

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.url.path in self.EXCLUDE_PATHS:
            return await call_next(request)

        method = request.method
        endpoint = self._normalize_path(request.url.path)

        REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            REQUEST_COUNT.labels(
                method=method,
                endpoint=endpoint,
                status_code=str(response.status_code),
            ).inc()
            REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(
                time.perf_counter() - start_time
            )
            return response

        except Exception as e:
            ERROR_COUNT.labels(
                error_type=type(e).__name__,
                endpoint=endpoint,
            ).inc()
            raise

        finally:
            REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).dec()

    def _normalize_path(self, path: str) -> str:
        """Normalize path by replacing UUIDs and IDs with placeholders."""
        path = re.sub(
            r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
            "{id}",
            path,
            flags=re.IGNORECASE,
        )
        path = re.sub(r"/\d+(/|$)", r"/{id}\1", path)
        return path


# Helper functions for recording business metrics


def record_decision(action: str, reason: str) -> None:
    """Record a monetization decision."""
    BOT_DECISIONS_TOTAL.labels(action=action, reason=reason).inc()


def record_ai_bot_detection(company: str) -> None:
    """Record a request classified as an AI crawler."""
    AI_BOT_DETECTIONS_TOTAL.labels(company=company).inc()


def record_revenue(source: str, amount: float) -> None:
    """Record revenue from a subscription grant or a settled payment."""
    if amount > 0:
        REVENUE_TOTAL.labels(source=source).inc(amount)


def record_analyzer_run(risk_score: str) -> None:
    """Record a completed exposure analysis."""
    ANALYZER_RUNS_TOTAL.labels(risk_score=risk_score).inc()


def record_site_registered() -> None:
    """Record a site registration."""
    SITES_REGISTERED_TOTAL.inc()
