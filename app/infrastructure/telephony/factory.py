"""Messaging provider factory."""

import logging

from app.infrastructure.telephony.base import MessagingProviderProtocol
from app.infrastructure.telephony.twilio_provider import TwilioMessagingProvider
from app.settings import Settings

logger = logging.getLogger(__name__)


def get_messaging_provider(config: Settings) -> MessagingProviderProtocol | None:
    """Build the platform messaging provider.

    Credentials are platform-wide, not per building.

    Returns:
        Provider instance, or None when Twilio isn't configured
    """
    if not config.twilio_account_sid or not config.twilio_auth_token:
        logger.warning("Twilio credentials not configured, outbound messaging disabled")
        return None
    return TwilioMessagingProvider(
        account_sid=config.twilio_account_sid,
        auth_token=config.twilio_auth_token,
        timeout_seconds=config.dispatch_timeout_seconds,
    )
