"""Base messaging provider interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class SendResult:
    """Result of a message send operation."""

    message_id: str
    status: str
    to: str
    from_: str
    provider: str
    raw_response: dict | None = None


class ProviderSendError(Exception):
    """Raised when the gateway rejects or fails a send."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderRateLimitError(ProviderSendError):
    """Raised when the gateway answers 429 Too Many Requests."""


class MessagingProviderProtocol(ABC):
    """Protocol for outbound messaging provider implementations."""

    name: str = "unknown"

    @abstractmethod
    async def send_message(
        self,
        to: str,
        from_: str,
        body: str,
        channel: str = "whatsapp",
    ) -> SendResult:
        """Send a message.

        Args:
            to: Recipient address (E.164, no transport prefix)
            from_: Sender address (E.164, no transport prefix)
            body: Message body
            channel: whatsapp or sms

        Returns:
            SendResult with message ID and status

        Raises:
            ProviderRateLimitError: On a rate-limit response
            ProviderSendError: On any other failure
        """
        pass

    @abstractmethod
    def validate_webhook_signature(
        self,
        url: str,
        params: dict[str, Any],
        signature: str,
    ) -> bool:
        """Validate an incoming webhook signature."""
        pass

    async def aclose(self) -> None:
        """Release HTTP resources. No-op by default."""
        return None
