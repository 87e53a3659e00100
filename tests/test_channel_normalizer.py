"""Tests for inbound payload normalization."""

from app.core.phone import detect_channel, normalize_address, strip_channel_prefix
from app.domain.services.channel_normalizer import normalize_inbound


def _payload(**overrides):
    data = {
        "MessageSid": "SM0001",
        "From": "whatsapp:+17875552222",
        "To": "whatsapp:+17875550000",
        "Body": "Hay un salidero en la cocina",
        "NumMedia": "0",
        "ProfileName": "Luis",
    }
    data.update(overrides)
    return data


class TestAddressHelpers:
    def test_strips_any_scheme_prefix(self):
        assert strip_channel_prefix("whatsapp:+17875550000") == "+17875550000"
        assert strip_channel_prefix("sms:+17875550000") == "+17875550000"
        assert strip_channel_prefix("+17875550000") == "+17875550000"

    def test_detects_channel_from_sender_prefix(self):
        assert detect_channel("whatsapp:+17875550000") == "whatsapp"
        assert detect_channel("WhatsApp:+17875550000") == "whatsapp"
        assert detect_channel("+17875550000") == "sms"

    def test_normalizes_local_numbers_to_e164(self):
        assert normalize_address("(787) 555-2222") == "+17875552222"
        assert normalize_address("whatsapp:1-787-555-2222") == "+17875552222"

    def test_keeps_international_numbers(self):
        assert normalize_address("whatsapp:+34612345678") == "+34612345678"


class TestNormalizeInbound:
    def test_whatsapp_payload(self):
        inbound = normalize_inbound(_payload())

        assert inbound is not None
        assert inbound.external_id == "SM0001"
        assert inbound.from_address == "+17875552222"
        assert inbound.to_address == "+17875550000"
        assert inbound.channel == "whatsapp"
        assert inbound.body == "Hay un salidero en la cocina"
        assert inbound.profile_name == "Luis"
        assert inbound.media_url is None

    def test_sms_payload_without_prefix(self):
        inbound = normalize_inbound(_payload(From="+17875552222", To="+17875550001"))

        assert inbound.channel == "sms"
        assert inbound.to_address == "+17875550001"

    def test_media_only_message(self):
        inbound = normalize_inbound(
            _payload(
                Body="",
                NumMedia="1",
                MediaUrl0="https://api.twilio.com/media/ME1",
                MediaContentType0="image/jpeg",
            )
        )

        assert inbound is not None
        assert inbound.body == ""
        assert inbound.media_url == "https://api.twilio.com/media/ME1"
        assert inbound.media_type == "image/jpeg"

    def test_missing_required_fields_is_unparseable(self):
        assert normalize_inbound(_payload(MessageSid="")) is None
        assert normalize_inbound(_payload(From="")) is None
        assert normalize_inbound({"Body": "hola"}) is None

    def test_empty_body_without_media_is_unparseable(self):
        assert normalize_inbound(_payload(Body="   ")) is None

    def test_non_mapping_payload_never_raises(self):
        assert normalize_inbound(None) is None
        assert normalize_inbound("MessageSid=SM1") is None
        assert normalize_inbound(["SM1"]) is None

    def test_bad_media_count_is_tolerated(self):
        inbound = normalize_inbound(_payload(NumMedia="lots"))

        assert inbound is not None
        assert inbound.media_url is None

    def test_legacy_sms_sid_field(self):
        payload = _payload()
        del payload["MessageSid"]
        payload["SmsMessageSid"] = "SM0002"

        assert normalize_inbound(payload).external_id == "SM0002"
