"""Tests for the Twilio messaging provider."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from twilio.base.exceptions import TwilioRestException

from app.infrastructure.telephony.base import ProviderRateLimitError, ProviderSendError
from app.infrastructure.telephony.factory import get_messaging_provider
from app.infrastructure.telephony.twilio_provider import TwilioMessagingProvider, to_twilio_address
from app.settings import Settings


@pytest.fixture
async def provider():
    provider = TwilioMessagingProvider("AC123", "token", timeout_seconds=1.0)
    provider.client = MagicMock()
    provider.client.messages.create_async = AsyncMock(
        return_value=MagicMock(sid="SM999", status="queued", date_created=datetime(2026, 1, 1))
    )
    yield provider
    await provider.aclose()


class TestAddresses:
    def test_whatsapp_prefix_added(self):
        assert to_twilio_address("+17875550000", "whatsapp") == "whatsapp:+17875550000"
        assert to_twilio_address("whatsapp:+17875550000", "whatsapp") == "whatsapp:+17875550000"

    def test_sms_is_bare(self):
        assert to_twilio_address("whatsapp:+17875550000", "sms") == "+17875550000"


class TestSendMessage:
    async def test_success(self, provider):
        result = await provider.send_message("+17875552222", "+17875550000", "Hola", "whatsapp")

        assert result.message_id == "SM999"
        assert result.provider == "twilio"
        provider.client.messages.create_async.assert_awaited_once_with(
            to="whatsapp:+17875552222", from_="whatsapp:+17875550000", body="Hola"
        )

    async def test_429_maps_to_rate_limit(self, provider):
        provider.client.messages.create_async.side_effect = TwilioRestException(
            429, "/Messages", msg="Too Many Requests"
        )

        with pytest.raises(ProviderRateLimitError) as exc_info:
            await provider.send_message("+17875552222", "+17875550000", "Hola")

        assert exc_info.value.status_code == 429

    async def test_other_rest_errors_map_to_send_error(self, provider):
        provider.client.messages.create_async.side_effect = TwilioRestException(
            400, "/Messages", msg="Invalid 'To' number"
        )

        with pytest.raises(ProviderSendError) as exc_info:
            await provider.send_message("+17875552222", "+17875550000", "Hola")

        assert not isinstance(exc_info.value, ProviderRateLimitError)
        assert exc_info.value.status_code == 400

    async def test_transport_error(self, provider):
        provider.client.messages.create_async.side_effect = ConnectionResetError("reset")

        with pytest.raises(ProviderSendError):
            await provider.send_message("+17875552222", "+17875550000", "Hola")

    async def test_missing_signature_is_invalid(self, provider):
        assert provider.validate_webhook_signature("https://x/inbound", {}, "") is False

    async def test_aclose_releases_http_session(self):
        provider = TwilioMessagingProvider("AC123", "token", timeout_seconds=1.0)

        await provider.aclose()

        session = provider.http_client.session
        assert session is None or session.closed


class TestFactory:
    def test_unconfigured_returns_none(self):
        config = Settings(twilio_account_sid=None, twilio_auth_token=None)

        assert get_messaging_provider(config) is None
