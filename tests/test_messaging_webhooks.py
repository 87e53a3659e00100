"""Tests for the inbound messaging webhook."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_classifier, get_dispatcher, get_email_client
from app.api.routes.messaging_webhooks import TWIML_ACK
from app.domain.services.intake_service import IntakeResult
from app.main import app
from app.persistence.database import get_db
from app.settings import settings

URL = f"{settings.api_v1_prefix}/messaging/inbound"

FORM = {
    "MessageSid": "SM0001",
    "From": "whatsapp:+17875552222",
    "To": "whatsapp:+17875550000",
    "Body": "Hay un salidero en la cocina",
    "NumMedia": "0",
}


async def _fake_db():
    yield MagicMock()


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = _fake_db
    app.dependency_overrides[get_classifier] = lambda: MagicMock()
    app.dependency_overrides[get_dispatcher] = lambda: MagicMock()
    app.dependency_overrides[get_email_client] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def redis_mock():
    mock = MagicMock()
    mock.setnx = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=1)
    with patch("app.api.routes.messaging_webhooks.redis_client", mock):
        yield mock


@pytest.fixture
def intake_cls():
    with patch("app.api.routes.messaging_webhooks.IntakeService") as cls:
        cls.return_value.process = AsyncMock(
            return_value=IntakeResult(status="processed", conversation_id=1, message_id=1)
        )
        yield cls


def _assert_ack(response):
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    assert response.text == TWIML_ACK


class TestInboundWebhook:
    def test_probe(self, client):
        response = client.get(URL)

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_processes_form_payload(self, client, redis_mock, intake_cls):
        response = client.post(URL, data=FORM)

        _assert_ack(response)
        inbound = intake_cls.return_value.process.await_args.args[0]
        assert inbound.external_id == "SM0001"
        assert inbound.from_address == "+17875552222"
        assert inbound.channel == "whatsapp"
        redis_mock.setnx.assert_awaited_once()

    def test_processes_json_payload(self, client, redis_mock, intake_cls):
        response = client.post(URL, json=FORM)

        _assert_ack(response)
        intake_cls.return_value.process.assert_awaited_once()

    def test_unparseable_payload_is_acked(self, client, redis_mock, intake_cls):
        response = client.post(URL, data={"Body": "hola"})

        _assert_ack(response)
        intake_cls.return_value.process.assert_not_awaited()

    def test_malformed_json_is_acked(self, client, redis_mock, intake_cls):
        response = client.post(URL, content=b"{not json", headers={"content-type": "application/json"})

        _assert_ack(response)
        intake_cls.return_value.process.assert_not_awaited()

    def test_duplicate_delivery_skipped(self, client, redis_mock, intake_cls):
        redis_mock.setnx.return_value = False

        response = client.post(URL, data=FORM)

        _assert_ack(response)
        intake_cls.return_value.process.assert_not_awaited()
        redis_mock.delete.assert_not_awaited()

    def test_processing_error_still_acked_and_releases_key(self, client, redis_mock, intake_cls):
        intake_cls.return_value.process.side_effect = RuntimeError("database unavailable")

        response = client.post(URL, data=FORM)

        _assert_ack(response)
        redis_mock.delete.assert_awaited_once()


class TestSignatureValidation:
    def test_invalid_signature_dropped_in_production(self, client, redis_mock, intake_cls):
        with patch.object(settings, "twilio_auth_token", "secret"), patch.object(
            settings, "twilio_validate_signatures", True
        ), patch.object(settings, "environment", "production"):
            response = client.post(URL, data=FORM, headers={"X-Twilio-Signature": "bogus"})

        _assert_ack(response)
        intake_cls.return_value.process.assert_not_awaited()

    def test_invalid_signature_tolerated_in_development(self, client, redis_mock, intake_cls):
        with patch.object(settings, "twilio_auth_token", "secret"), patch.object(
            settings, "twilio_validate_signatures", True
        ), patch.object(settings, "environment", "development"):
            response = client.post(URL, data=FORM)

        _assert_ack(response)
        intake_cls.return_value.process.assert_awaited_once()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
