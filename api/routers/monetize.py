"""Monetization decision endpoint called by the site plugin."""

import time
import uuid
from typing import Any

import structlog
from fastapi import APIRouter

from api.deps import ClassifierDep, DecisionMachineDep, RateLimiterDep, SiteServiceDep
from api.exceptions import AuthenticationError, RateLimitError
from api.metrics import record_ai_bot_detection
from api.models import BotAction
from api.schemas.monetization import MonetizeRequest, MonetizeResponse
from api.services.monetization_service import Paywall

router = APIRouter(tags=["Monetization"])
logger = structlog.get_logger(__name__)


@router.post(
    "/monetize",
    response_model=MonetizeResponse,
    response_model_exclude_none=True,
    summary="Decide whether to allow, log or paywall a request",
)
async def monetize(
    body: MonetizeRequest,
    site_service: SiteServiceDep,
    rate_limiter: RateLimiterDep,
    classifier: ClassifierDep,
    machine: DecisionMachineDep,
) -> MonetizeResponse:
    """
    Classify one inbound request and decide what the plugin should do.

    - 401 for an unknown or inactive API key
    - 429 once the site exceeds its hourly cap; checked before any classification
    - 502 if a paywall is due but the payment could not be created
    """
    start_time = time.perf_counter()

    context = await site_service.get_site_by_api_key(body.api_key)
    if context is None:
        logger.warning("monetize_invalid_api_key", api_key=body.api_key)
        raise AuthenticationError()
    site = context.site

    limit = rate_limiter.check(site.subscription_tier, context.hourly_request_count)
    if not limit.allowed:
        logger.warning(
            "rate_limit_exceeded",
            site_id=str(site.id),
            limit=limit.limit,
            current=limit.current,
        )
        raise RateLimitError(limit=limit.limit, current=limit.current)

    request_data = body.request_data
    # Known before the decision so a paywall payment can point back at this log row
    request_id = uuid.uuid4()
    classification = classifier.classify(
        request_data.user_agent,
        accept_language=request_data.accept_language,
        accept_encoding=request_data.accept_encoding,
    )
    if classification.is_ai_bot:
        record_ai_bot_detection(classification.bot_company or "unknown")

    action = await machine.decide(
        site,
        classification,
        content_length=request_data.content_length,
        page_url=request_data.page_url,
        user_agent=request_data.user_agent,
        request_id=request_id,
    )

    outcome: dict[str, Any]
    if isinstance(action, Paywall):
        outcome = {
            "action_taken": BotAction.PAYWALL.value,
            "payment_id": action.payment_id,
        }
    else:
        outcome = {
            "action_taken": BotAction.ALLOWED.value,
            "reason": action.reason.value,
            "revenue_amount": action.revenue or 0.0,
            "lost_revenue": action.lost_revenue or 0.0,
        }

    await site_service.log_bot_request(
        site.id,
        id=request_id,
        ip_address=request_data.ip_address,
        user_agent=request_data.user_agent,
        page_url=request_data.page_url,
        content_length=request_data.content_length,
        is_ai_bot=classification.is_ai_bot,
        bot_type=classification.bot_type,
        bot_company=classification.bot_company,
        confidence=classification.confidence,
        **outcome,
        processing_time_ms=int((time.perf_counter() - start_time) * 1000),
    )

    return MonetizeResponse(**action.to_dict())
