"""Admin profile and building membership models."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.persistence.database import Base

DEFAULT_NOTIFICATION_PREFERENCES = {
    "emergency": True,
    "high": True,
    "maintenance": True,
    "general": False,
}


class AdminProfile(Base):
    """Administrator contact details and notification preferences."""

    __tablename__ = "admin_profiles"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    notification_email = Column(String(255), nullable=True)
    notification_phone = Column(String(50), nullable=True)
    # {"emergency": bool, "high": bool, "maintenance": bool, "general": bool}
    notification_preferences = Column(JSON, nullable=True)
    language = Column(String(5), default="es", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    memberships = relationship("BuildingAdmin", back_populates="profile", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<AdminProfile(id={self.id}, full_name={self.full_name})>"


class BuildingAdmin(Base):
    """Membership of an admin in a building."""

    __tablename__ = "building_admins"
    __table_args__ = (
        UniqueConstraint("building_id", "admin_profile_id", name="uq_building_admins_member"),
    )

    id = Column(Integer, primary_key=True, index=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False, index=True)
    admin_profile_id = Column(Integer, ForeignKey("admin_profiles.id"), nullable=False, index=True)
    role = Column(String(50), default="admin", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    profile = relationship("AdminProfile", back_populates="memberships")

    def __repr__(self) -> str:
        return f"<BuildingAdmin(building_id={self.building_id}, admin_profile_id={self.admin_profile_id})>"
