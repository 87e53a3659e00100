"""Resident model."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.persistence.database import Base


class Resident(Base):
    """Owner or renter tied to a building and optionally a unit."""

    __tablename__ = "residents"

    id = Column(Integer, primary_key=True, index=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False, index=True)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=True, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    role = Column(String(20), nullable=False)  # owner, renter

    # Either number may identify the resident on an inbound message
    phone = Column(String(50), nullable=True, index=True)
    whatsapp_number = Column(String(50), nullable=True, index=True)

    opted_in_whatsapp = Column(Boolean, default=False, nullable=False)
    opted_in_sms = Column(Boolean, default=False, nullable=False)
    preferred_language = Column(String(5), default="es", nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    building = relationship("Building", back_populates="residents")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def is_opted_in(self, channel: str) -> bool:
        """Whether the resident accepted messages on the given channel."""
        if channel == "whatsapp":
            return bool(self.opted_in_whatsapp)
        return bool(self.opted_in_sms)

    def __repr__(self) -> str:
        return f"<Resident(id={self.id}, building_id={self.building_id}, role={self.role})>"
