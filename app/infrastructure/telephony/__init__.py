"""Messaging provider infrastructure."""

from app.infrastructure.telephony.base import (
    MessagingProviderProtocol,
    ProviderRateLimitError,
    ProviderSendError,
    SendResult,
)
from app.infrastructure.telephony.factory import get_messaging_provider

__all__ = [
    "MessagingProviderProtocol",
    "ProviderRateLimitError",
    "ProviderSendError",
    "SendResult",
    "get_messaging_provider",
]
