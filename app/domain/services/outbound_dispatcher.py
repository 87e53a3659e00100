"""Outbound dispatcher: gateway sends with bounded retry and backoff."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from app.core.phone import CHANNEL_WHATSAPP
from app.infrastructure.telephony.base import MessagingProviderProtocol, ProviderRateLimitError
from app.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of one dispatch, including every retry."""

    success: bool
    message_id: str | None = None
    attempts: int = 0
    rate_limited: bool = False
    error: str | None = None


class OutboundDispatcher:
    """Sends messages through the provider, retrying transient failures.

    Rate limits back off exponentially (base, 2x base, 4x base...), other
    failures wait a fixed delay. Every delay is capped. Exhausted retries
    are logged and returned as a failed result, never raised.
    """

    def __init__(
        self,
        provider: MessagingProviderProtocol | None,
        max_retries: int = 3,
        rate_limit_base_delay: float = 2.0,
        retry_delay: float = 3.0,
        max_backoff: float = 8.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.max_retries = max_retries
        self.rate_limit_base_delay = rate_limit_base_delay
        self.retry_delay = retry_delay
        self.max_backoff = max_backoff
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls, provider: MessagingProviderProtocol | None, config: Settings
    ) -> "OutboundDispatcher":
        return cls(
            provider,
            max_retries=config.dispatch_max_retries,
            rate_limit_base_delay=config.dispatch_rate_limit_base_delay_seconds,
            retry_delay=config.dispatch_retry_delay_seconds,
            max_backoff=config.dispatch_max_backoff_seconds,
        )

    def backoff_delay(self, retry_index: int, rate_limited: bool) -> float:
        """Delay before retry number `retry_index` (0-based)."""
        if rate_limited:
            delay = self.rate_limit_base_delay * (2 ** retry_index)
        else:
            delay = self.retry_delay
        return min(delay, self.max_backoff)

    async def send(
        self,
        to_address: str,
        from_address: str,
        body: str,
        channel: str = CHANNEL_WHATSAPP,
    ) -> DispatchResult:
        """Send one message, retrying up to `max_retries` times.

        Args:
            to_address: Recipient (E.164)
            from_address: Building's channel address (E.164)
            body: Message text
            channel: whatsapp or sms

        Returns:
            DispatchResult; never raises
        """
        if self.provider is None:
            logger.error(f"No messaging provider configured, dropping message to {to_address}")
            return DispatchResult(success=False, error="provider_not_configured")

        attempts = 0
        rate_limited = False
        last_error: str | None = None

        for retry_index in range(self.max_retries + 1):
            attempts += 1
            try:
                result = await self.provider.send_message(
                    to=to_address, from_=from_address, body=body, channel=channel
                )
            except ProviderRateLimitError as e:
                rate_limited = True
                last_error = str(e)
                is_rate_limit = True
            except Exception as e:
                last_error = f"{type(e).__name__}: {e}"
                is_rate_limit = False
            else:
                logger.info(
                    "Outbound message sent",
                    extra={
                        "message_id": result.message_id,
                        "channel": channel,
                        "attempts": attempts,
                    },
                )
                return DispatchResult(
                    success=True,
                    message_id=result.message_id,
                    attempts=attempts,
                    rate_limited=rate_limited,
                )

            if retry_index >= self.max_retries:
                break

            delay = self.backoff_delay(retry_index, is_rate_limit)
            logger.warning(
                f"Send attempt {attempts} failed ({last_error}), retrying in {delay}s",
                extra={"channel": channel, "rate_limited": is_rate_limit},
            )
            await self._sleep(delay)

        logger.error(
            f"Giving up on message to {to_address} after {attempts} attempts: {last_error}",
            extra={"channel": channel, "rate_limited": rate_limited},
        )
        return DispatchResult(
            success=False,
            attempts=attempts,
            rate_limited=rate_limited,
            error=last_error,
        )
