"""Notification model for the dashboard's in-app feed."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from app.persistence.database import Base


class Notification(Base):
    """In-app notification shown to building admins."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False, index=True)

    # Notification type: "new_message", "maintenance_request", "emergency"
    notification_type = Column(String(50), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)

    # Deep link within the dashboard
    link = Column(String(500), nullable=True)

    is_read = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, building_id={self.building_id}, type={self.notification_type}, is_read={self.is_read})>"


class NotificationType:
    """Notification type constants."""
    NEW_MESSAGE = "new_message"
    MAINTENANCE_REQUEST = "maintenance_request"
    EMERGENCY = "emergency"
