"""Maintenance request model."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from app.persistence.database import Base

# Statuses the dashboard treats as still open work
ACTIVE_TICKET_STATUSES = ("open", "in_progress")


class MaintenanceRequest(Base):
    """Maintenance ticket, optionally materialized from an inbound message."""

    __tablename__ = "maintenance_requests"

    id = Column(Integer, primary_key=True, index=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False, index=True)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=True, index=True)
    resident_id = Column(Integer, ForeignKey("residents.id"), nullable=True, index=True)

    # Originating chat, shown by the dashboard next to the ticket
    conversation_id = Column(Integer, ForeignKey("conversations.id"), nullable=True, index=True)
    # One ticket per inbound message at most
    source_message_id = Column(Integer, ForeignKey("messages.id"), nullable=True, unique=True)

    title = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False, default="general")
    location = Column(String(255), nullable=True)
    priority = Column(String(20), nullable=False, default="medium")
    description = Column(Text, nullable=False)

    # Lifecycle is owned by the dashboard; this service only creates "open"
    status = Column(String(50), nullable=False, default="open", index=True)
    extracted_by_ai = Column(Boolean, default=False, nullable=False)
    photo_urls = Column(JSON, nullable=True)

    reported_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<MaintenanceRequest(id={self.id}, building_id={self.building_id}, status={self.status})>"
