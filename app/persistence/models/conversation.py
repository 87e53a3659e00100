"""Conversation and Message models."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship

from app.persistence.database import Base

CONVERSATION_ACTIVE = "active"
CONVERSATION_CLOSED = "closed"

SENDER_RESIDENT = "resident"
SENDER_AI = "ai"
SENDER_ADMIN = "admin"

# Predicates shared by the partial unique indexes and ON CONFLICT inserts
ACTIVE_CONVERSATION_PREDICATE = text("status = 'active'")
RESIDENT_MESSAGE_PREDICATE = text("sender_type = 'resident'")


class Conversation(Base):
    """Continuity context for one resident on one channel of a building."""

    __tablename__ = "conversations"
    __table_args__ = (
        # At most one active conversation per (building, resident, channel)
        Index(
            "uq_conversations_active_triple",
            "building_id",
            "resident_id",
            "channel",
            unique=True,
            postgresql_where=ACTIVE_CONVERSATION_PREDICATE,
            sqlite_where=ACTIVE_CONVERSATION_PREDICATE,
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False, index=True)
    resident_id = Column(Integer, ForeignKey("residents.id"), nullable=False, index=True)
    channel = Column(String(20), nullable=False)  # whatsapp, sms
    status = Column(String(20), default=CONVERSATION_ACTIVE, nullable=False)
    last_message_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    messages = relationship(
        "Message", back_populates="conversation", cascade="all, delete-orphan", order_by="Message.id"
    )

    def __repr__(self) -> str:
        return f"<Conversation(id={self.id}, building_id={self.building_id}, channel={self.channel}, status={self.status})>"


class Message(Base):
    """Append-only log entry in a conversation."""

    __tablename__ = "messages"
    __table_args__ = (
        # Provider ids are globally unique; a resident message is logged once
        # whichever conversation the redelivery lands in
        Index(
            "uq_messages_resident_external_id",
            "external_message_id",
            unique=True,
            postgresql_where=RESIDENT_MESSAGE_PREDICATE,
            sqlite_where=RESIDENT_MESSAGE_PREDICATE,
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id"), nullable=False, index=True)
    sender_type = Column(String(20), nullable=False)  # resident, ai, admin
    sender_id = Column(Integer, nullable=True)
    content = Column(Text, nullable=False)
    channel = Column(String(20), nullable=False)

    # Provider message id (Twilio SID) for inbound and sent messages
    external_message_id = Column(String(255), nullable=True, index=True)

    # Routing outcome (resident messages only)
    intent = Column(String(100), nullable=True)
    priority = Column(String(20), nullable=True)
    route_to = Column(String(20), nullable=True)
    requires_human_review = Column(Boolean, default=False, nullable=False)

    media_url = Column(Text, nullable=True)
    media_type = Column(String(100), nullable=True)

    # Classification metadata: suggested response, extracted data, source
    message_metadata = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, conversation_id={self.conversation_id}, sender_type={self.sender_type})>"
