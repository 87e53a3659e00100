"""Replies sent to numbers that are not registered residents."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from app.persistence.database import Base


class UnknownSenderAttempt(Base):
    """One inbound message from an unrecognized number that was answered.

    Only the provider id and the sender's address are kept, never the body.
    The unique provider id makes the "not recognized" reply go out once per
    message even when the webhook is redelivered.
    """

    __tablename__ = "unknown_sender_attempts"

    id = Column(Integer, primary_key=True, index=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False, index=True)
    external_message_id = Column(String(255), nullable=False, unique=True)
    from_address = Column(String(50), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<UnknownSenderAttempt(id={self.id}, building_id={self.building_id}, external_message_id={self.external_message_id})>"
