"""Stripe webhook endpoint."""

import hashlib
import hmac
import time
from typing import Annotated, Any

import orjson
import structlog
from fastapi import APIRouter, Header, Request

from api.deps import SettingsDep, SettlementServiceDep
from api.exceptions import BadRequestError, ServiceUnavailableError

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])
logger = structlog.get_logger(__name__)

# Reject signatures older than this to limit replays
SIGNATURE_TOLERANCE_SECONDS = 300


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    settings: SettingsDep,
    settlement: SettlementServiceDep,
    stripe_signature: Annotated[str | None, Header(alias="stripe-signature")] = None,
) -> dict[str, Any]:
    """Handle Stripe webhook events.

    Verifies the signature, settles ``payment_intent.succeeded`` and
    acknowledges everything else.
    """
    if not settings.stripe_webhook_secret:
        raise ServiceUnavailableError(
            "Webhook secret not configured", code="webhook_not_configured"
        )

    if not stripe_signature:
        raise BadRequestError("Missing stripe-signature header", code="invalid_signature")

    body = await request.body()

    try:
        _verify_stripe_signature(body, stripe_signature, settings.stripe_webhook_secret)
    except ValueError as e:
        logger.warning("stripe_webhook_invalid_signature", error=str(e))
        raise BadRequestError("Invalid signature", code="invalid_signature") from e

    try:
        event = orjson.loads(body)
    except orjson.JSONDecodeError as e:
        raise BadRequestError("Invalid JSON") from e

    event_type = event.get("type", "")
    event_id = event.get("id", "")

    logger.info(
        "stripe_webhook_received",
        event_type=event_type,
        event_id=event_id,
    )

    if event_type == "payment_intent.succeeded":
        payment_intent = event.get("data", {}).get("object", {})
        try:
            payment = await settlement.settle(payment_intent)
        except Exception as e:
            # Let Stripe retry; settlement is idempotent per payment intent
            logger.error(
                "stripe_webhook_processing_error",
                event_type=event_type,
                event_id=event_id,
                error=str(e),
            )
            raise
        return {"received": True, "settled": payment is not None}

    logger.debug("stripe_webhook_unhandled_type", event_type=event_type)
    return {"received": True}


def _verify_stripe_signature(
    payload: bytes,
    signature: str,
    secret: str,
    tolerance: int = SIGNATURE_TOLERANCE_SECONDS,
    now: float | None = None,
) -> None:
    """Verify a ``t=...,v1=...`` Stripe signature header.

    Raises:
        ValueError: If the header is malformed, stale or does not match
    """
    timestamp: str | None = None
    v1_signatures: list[str] = []
    for item in signature.split(","):
        key, _, value = item.strip().partition("=")
        if key == "t":
            timestamp = value
        elif key == "v1":
            v1_signatures.append(value)

    if not timestamp or not v1_signatures:
        raise ValueError("Invalid signature format")

    try:
        signed_at = int(timestamp)
    except ValueError as e:
        raise ValueError("Invalid signature timestamp") from e

    if tolerance and abs((now if now is not None else time.time()) - signed_at) > tolerance:
        raise ValueError("Signature timestamp outside tolerance")

    signed_payload = f"{timestamp}.".encode() + payload
    expected_signature = hmac.new(
        secret.encode(),
        signed_payload,
        hashlib.sha256,
    ).hexdigest()

    if not any(hmac.compare_digest(expected_signature, sig) for sig in v1_signatures):
        raise ValueError("Signature mismatch")
