"""Normalize provider webhook payloads into InboundMessage."""

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from app.core.phone import detect_channel, normalize_address
from app.domain.models.inbound import InboundMessage

logger = logging.getLogger(__name__)

# Twilio sends MessageSid; older SMS webhooks also carry SmsMessageSid
_MESSAGE_ID_FIELDS = ("MessageSid", "SmsMessageSid", "SmsSid")


def _field(payload: Mapping, name: str) -> str:
    value: Any = payload.get(name)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else ""
    return str(value).strip()


def _media_count(payload: Mapping) -> int:
    try:
        return int(_field(payload, "NumMedia") or 0)
    except ValueError:
        return 0


def normalize_inbound(payload: Any) -> InboundMessage | None:
    """Parse a Twilio messaging webhook payload.

    Works for form-encoded and JSON bodies alike, since both arrive here as a
    mapping of Twilio field names. Never raises.

    Args:
        payload: Webhook fields (MessageSid, From, To, Body, NumMedia, MediaUrl0, ...)

    Returns:
        InboundMessage, or None when the payload can't be processed
    """
    if not isinstance(payload, Mapping):
        logger.warning(f"Unparseable webhook payload type: {type(payload).__name__}")
        return None

    try:
        external_id = next(
            (_field(payload, name) for name in _MESSAGE_ID_FIELDS if _field(payload, name)),
            "",
        )
        raw_from = _field(payload, "From")
        raw_to = _field(payload, "To")
        from_address = normalize_address(raw_from)
        to_address = normalize_address(raw_to)

        if not external_id or not from_address or not to_address:
            logger.warning(
                "Inbound payload missing required fields",
                extra={
                    "has_message_id": bool(external_id),
                    "has_from": bool(from_address),
                    "has_to": bool(to_address),
                },
            )
            return None

        body = _field(payload, "Body")
        media_url = None
        media_type = None
        if _media_count(payload) > 0 or _field(payload, "MediaUrl0"):
            media_url = _field(payload, "MediaUrl0") or None
            media_type = _field(payload, "MediaContentType0") or None

        if not body and not media_url:
            logger.info(f"Inbound message {external_id} has no body or media, ignoring")
            return None

        return InboundMessage(
            external_id=external_id,
            from_address=from_address,
            to_address=to_address,
            body=body,
            channel=detect_channel(raw_from),
            media_url=media_url,
            media_type=media_type,
            profile_name=_field(payload, "ProfileName") or None,
            received_at=datetime.utcnow(),
        )
    except Exception as e:
        logger.warning(f"Failed to normalize inbound payload: {type(e).__name__}: {e}")
        return None
