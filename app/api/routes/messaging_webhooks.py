"""Messaging webhook endpoints for Twilio (WhatsApp and SMS)."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
from twilio.request_validator import RequestValidator

from app.api.deps import get_classifier, get_dispatcher, get_email_client
from app.core.building_context import clear_building_context
from app.core.idempotency import inbound_dedup_key
from app.domain.services.channel_normalizer import normalize_inbound
from app.domain.services.classification_service import Classifier
from app.domain.services.intake_service import IntakeService
from app.domain.services.outbound_dispatcher import OutboundDispatcher
from app.infrastructure.redis import redis_client
from app.infrastructure.sendgrid_client import SendGridClient
from app.persistence.database import get_db
from app.settings import settings

logger = logging.getLogger(__name__)

TWIML_ACK = '<?xml version="1.0" encoding="UTF-8"?><Response></Response>'

router = APIRouter()


def _ack() -> Response:
    return Response(content=TWIML_ACK, media_type="application/xml")


async def _read_payload(request: Request) -> dict[str, Any] | None:
    """Read the webhook body as a flat dict, form-encoded or JSON.

    Returns None instead of raising for bodies that can't be parsed.
    """
    content_type = request.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            data = await request.json()
            return data if isinstance(data, dict) else None
        form = await request.form()
        return {key: form[key] for key in form}
    except Exception as e:
        logger.warning(f"Could not parse webhook body ({content_type}): {type(e).__name__}: {e}")
        return None


def _validate_twilio_signature(request: Request, params: dict[str, Any]) -> bool:
    """Validate the X-Twilio-Signature header with the platform auth token.

    Returns:
        True if valid or if validation is disabled/unconfigured
    """
    if not settings.twilio_validate_signatures or not settings.twilio_auth_token:
        return True
    signature = request.headers.get("X-Twilio-Signature", "")
    if not signature:
        logger.warning("Missing X-Twilio-Signature header")
        return False
    validator = RequestValidator(settings.twilio_auth_token)
    return validator.validate(str(request.url), params, signature)


@router.get("/inbound")
async def inbound_webhook_probe() -> dict[str, str]:
    """Verification probe for webhook configuration."""
    return {"status": "ok"}


@router.post("/inbound")
async def inbound_message_webhook(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    classifier: Annotated[Classifier, Depends(get_classifier)],
    dispatcher: Annotated[OutboundDispatcher, Depends(get_dispatcher)],
    email_client: Annotated[SendGridClient | None, Depends(get_email_client)],
) -> Response:
    """Handle an inbound WhatsApp/SMS webhook from Twilio.

    Always answers 200 with an empty TwiML document, whatever happens
    inside. An error status would make Twilio redeliver a message that may
    already be partially handled.

    Returns:
        TwiML response (empty for ACK)
    """
    dedup_key: str | None = None
    try:
        payload = await _read_payload(request)
        if payload is None:
            return _ack()

        if not _validate_twilio_signature(request, payload):
            if settings.environment == "production":
                logger.warning("Invalid Twilio signature, message not processed")
                return _ack()
            logger.warning("Invalid Twilio signature (ignored in dev)")

        inbound = normalize_inbound(payload)
        if inbound is None:
            return _ack()

        # Deduplicate by MessageSid to absorb Twilio redeliveries
        dedup_key = inbound_dedup_key(inbound.channel, inbound.external_id)
        if not await redis_client.setnx(dedup_key, "1", ttl=settings.message_dedup_ttl_seconds):
            logger.warning(
                "[DUPLICATE_WEBHOOK] Duplicate inbound message webhook ignored",
                extra={
                    "event_type": "duplicate_webhook_blocked",
                    "provider": "twilio",
                    "message_sid": inbound.external_id,
                    "channel": inbound.channel,
                },
            )
            dedup_key = None
            return _ack()

        intake = IntakeService(db, classifier, dispatcher, email_client)
        result = await intake.process(inbound)
        logger.info(
            f"Inbound {inbound.channel} message {inbound.external_id}: {result.status}",
            extra={"status": result.status, "conversation_id": result.conversation_id},
        )
        return _ack()

    except Exception as e:
        logger.error(f"Error processing inbound message webhook: {e}", exc_info=True)
        if dedup_key:
            # Let a manual replay through after a failed run
            await redis_client.delete(dedup_key)
        # Still return 200 to Twilio to avoid retries
        return _ack()
    finally:
        clear_building_context()
