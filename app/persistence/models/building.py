"""Building and Unit models."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.persistence.database import Base


class Building(Base):
    """Building model, the tenant root of the system."""

    __tablename__ = "buildings"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)

    # Inbound channel addresses (E.164, no transport prefix)
    whatsapp_number = Column(String(50), unique=True, nullable=True, index=True)
    sms_number = Column(String(50), unique=True, nullable=True, index=True)

    preferred_language = Column(String(5), default="es", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    units = relationship("Unit", back_populates="building", cascade="all, delete-orphan")
    residents = relationship(
        "Resident", back_populates="building", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Building(id={self.id}, name={self.name})>"


class Unit(Base):
    """Unit (apartment) within a building."""

    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False, index=True)
    unit_number = Column(String(50), nullable=False)
    owner_id = Column(
        Integer,
        ForeignKey("residents.id", use_alter=True, name="fk_units_owner_id"),
        nullable=True,
    )
    current_renter_id = Column(
        Integer,
        ForeignKey("residents.id", use_alter=True, name="fk_units_current_renter_id"),
        nullable=True,
    )

    # Relationships
    building = relationship("Building", back_populates="units")

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, building_id={self.building_id}, unit_number={self.unit_number})>"
