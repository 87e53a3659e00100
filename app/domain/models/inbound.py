"""Canonical inbound message."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class InboundMessage:
    """Provider-independent inbound message.

    Addresses carry no transport prefix (``whatsapp:+1787...`` becomes
    ``+1787...``); ``channel`` records which transport delivered it.
    """

    external_id: str
    from_address: str
    to_address: str
    body: str
    channel: str
    media_url: str | None = None
    media_type: str | None = None
    profile_name: str | None = None
    received_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def has_media(self) -> bool:
        return bool(self.media_url)
