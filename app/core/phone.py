"""Address utilities for consistent handling of channel addresses."""

import logging
import re

logger = logging.getLogger(__name__)

CHANNEL_WHATSAPP = "whatsapp"
CHANNEL_SMS = "sms"

# Transport scheme prefix as sent by the provider, e.g. "whatsapp:+17875550100"
_SCHEME_PREFIX = re.compile(r"^\s*([a-zA-Z][a-zA-Z0-9_-]*):")


def strip_channel_prefix(address: str | None) -> str:
    """Remove a transport scheme prefix from a provider address.

    Examples:
        whatsapp:+17875550100 → +17875550100
        sms:+17875550100      → +17875550100
        +17875550100          → +17875550100
    """
    if not address:
        return ""
    return _SCHEME_PREFIX.sub("", address, count=1).strip()


def detect_channel(address: str | None) -> str:
    """Detect the messaging channel from the sender address prefix."""
    if address and address.strip().lower().startswith(f"{CHANNEL_WHATSAPP}:"):
        return CHANNEL_WHATSAPP
    return CHANNEL_SMS


def normalize_phone_e164(phone: str | None) -> str | None:
    """Normalize phone number to E.164 format (+1XXXXXXXXXX for NANP numbers).

    Handles various input formats:
        (787)555-0100   → +17875550100
        787-555-0100    → +17875550100
        +1 787 555 0100 → +17875550100
        1-787-555-0100  → +17875550100

    Returns:
        Phone in E.164 format or the input unchanged if it can't be normalized
    """
    if not phone:
        return None

    digits = re.sub(r'\D', '', phone)

    # Already international, keep the country code as given
    if phone.strip().startswith('+') and len(digits) >= 8:
        return f"+{digits}"

    if len(digits) == 10:
        return f"+1{digits}"
    elif len(digits) == 11 and digits.startswith('1'):
        return f"+{digits}"

    logger.warning(f"Could not normalize phone number: {phone}")
    return phone


def normalize_address(address: str | None) -> str:
    """Strip the channel prefix and normalize the remaining phone number."""
    stripped = strip_channel_prefix(address)
    if not stripped:
        return ""
    return normalize_phone_e164(stripped) or stripped
