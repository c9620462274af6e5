"""Sentry error tracking integration."""

from __future__ import annotations

from typing import Any

import sentry_sdk
import structlog
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from api.config import Settings, get_settings
from api.exceptions import CrawltollError

logger = structlog.get_logger(__name__)

# Flag to track if Sentry is initialized
_sentry_initialized = False

SENSITIVE_HEADERS = ("authorization", "cookie", "stripe-signature", "x-api-key")
NOISY_TRANSACTIONS = ("/health", "/ready", "/metrics")


def init_sentry(settings: Settings | None = None) -> bool:
    """Initialize Sentry SDK if a DSN is configured.

    Returns True if Sentry was initialized, False otherwise.
    """
    global _sentry_initialized

    settings = settings or get_settings()
    if not settings.sentry_dsn:
        logger.info("sentry_not_configured")
        return False

    if _sentry_initialized:
        return True

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.env,
        release="crawltoll@0.1.0",
        sample_rate=1.0,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            HttpxIntegration(),
            AsyncioIntegration(),
        ],
        before_send=_before_send,
        before_send_transaction=_before_send_transaction,
    )

    _sentry_initialized = True
    logger.info("sentry_initialized", environment=settings.env)
    return True


def _before_send(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    """Drop client errors and scrub credentials."""
    if "exc_info" in hint:
        _, exc_value, _ = hint["exc_info"]
        # Bad keys and rate limits are the caller's problem; provider outages are ours
        if isinstance(exc_value, CrawltollError) and exc_value.status_code < 500:
            return None

    request_data = event.get("request")
    if request_data:
        headers = request_data.get("headers") or {}
        for header in SENSITIVE_HEADERS:
            if header in headers:
                headers[header] = "[Filtered]"

        body = request_data.get("data")
        if isinstance(body, dict) and "api_key" in body:
            body["api_key"] = "[Filtered]"

    return event


def _before_send_transaction(
    event: dict[str, Any], hint: dict[str, Any]  # noqa: ARG001
) -> dict[str, Any] | None:
    """Filter health-check and scrape transactions."""
    if event.get("transaction") in NOISY_TRANSACTIONS:
        return None
    return event
