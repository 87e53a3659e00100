"""Idempotency key handling utilities."""

import hashlib


def inbound_dedup_key(channel: str, external_id: str) -> str:
    """Build the Redis key used to drop repeated webhook deliveries.

    Args:
        channel: Messaging channel (whatsapp, sms)
        external_id: Provider message id (Twilio MessageSid)

    Returns:
        Redis key string
    """
    digest = hashlib.sha256(f"{channel}|{external_id}".encode()).hexdigest()[:32]
    return f"inbound_msg_processed:{digest}"
