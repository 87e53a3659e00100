"""Twilio messaging provider implementation."""

import asyncio
import logging
from typing import Any

from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.http.async_http_client import AsyncTwilioHttpClient
from twilio.request_validator import RequestValidator
from twilio.rest import Client as TwilioClient

from app.core.phone import CHANNEL_WHATSAPP, strip_channel_prefix
from app.infrastructure.telephony.base import (
    MessagingProviderProtocol,
    ProviderRateLimitError,
    ProviderSendError,
    SendResult,
)

logger = logging.getLogger(__name__)

HTTP_TOO_MANY_REQUESTS = 429


def to_twilio_address(address: str, channel: str) -> str:
    """Add the transport prefix Twilio expects for the channel."""
    bare = strip_channel_prefix(address)
    if channel == CHANNEL_WHATSAPP:
        return f"whatsapp:{bare}"
    return bare


class TwilioMessagingProvider(MessagingProviderProtocol):
    """Twilio WhatsApp/SMS provider using platform credentials.

    Sends go through Twilio's async HTTP client with an explicit per-call
    timeout so a slow gateway can't stall the webhook.
    """

    name = "twilio"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        timeout_seconds: float = 5.0,
    ) -> None:
        """Initialize Twilio client.

        Args:
            account_sid: Twilio account SID
            auth_token: Twilio auth token
            timeout_seconds: Upper bound for a single send call
        """
        if not account_sid or not auth_token:
            raise ValueError("Twilio account SID and auth token must be provided")

        self.account_sid = account_sid
        self.auth_token = auth_token
        self.timeout_seconds = timeout_seconds
        self.http_client = AsyncTwilioHttpClient(timeout=timeout_seconds)
        self.client = TwilioClient(account_sid, auth_token, http_client=self.http_client)
        self.validator = RequestValidator(auth_token)

    async def send_message(
        self,
        to: str,
        from_: str,
        body: str,
        channel: str = CHANNEL_WHATSAPP,
    ) -> SendResult:
        """Send a WhatsApp or SMS message via Twilio.

        Raises:
            ProviderRateLimitError: Twilio answered 429
            ProviderSendError: Any other Twilio or transport failure
        """
        to_addr = to_twilio_address(to, channel)
        from_addr = to_twilio_address(from_, channel)

        try:
            message = await asyncio.wait_for(
                self.client.messages.create_async(to=to_addr, from_=from_addr, body=body),
                timeout=self.timeout_seconds,
            )
        except TwilioRestException as e:
            if e.status == HTTP_TOO_MANY_REQUESTS:
                raise ProviderRateLimitError(
                    f"Twilio rate limited: {e.msg}", status_code=e.status
                ) from e
            raise ProviderSendError(f"Twilio send failed: {e.msg}", status_code=e.status) from e
        except asyncio.TimeoutError as e:
            raise ProviderSendError(f"Twilio send timed out after {self.timeout_seconds}s") from e
        except TwilioException as e:
            raise ProviderSendError(f"Twilio send failed: {e}") from e
        except OSError as e:
            raise ProviderSendError(f"Twilio transport error: {e}") from e

        return SendResult(
            message_id=message.sid,
            status=str(message.status),
            to=to_addr,
            from_=from_addr,
            provider=self.name,
            raw_response={
                "sid": message.sid,
                "status": str(message.status),
                "date_created": message.date_created.isoformat() if message.date_created else None,
            },
        )

    def validate_webhook_signature(
        self,
        url: str,
        params: dict[str, Any],
        signature: str,
    ) -> bool:
        """Validate the X-Twilio-Signature header."""
        if not signature:
            return False
        return self.validator.validate(url, params, signature)

    async def aclose(self) -> None:
        await self.http_client.close()
