"""Admin repository: notification targets for a building."""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.persistence.models.admin import (
    DEFAULT_NOTIFICATION_PREFERENCES,
    AdminProfile,
    BuildingAdmin,
)


@dataclass(frozen=True)
class AdminNotificationTarget:
    """Read-only view over admin profile x building membership."""

    admin_id: int
    full_name: str
    email: str | None
    phone: str | None
    notify_emergency: bool
    notify_high: bool
    notify_maintenance: bool
    notify_general: bool
    language: str = "es"


class AdminRepository:
    """Reads admins of a building with their notification preferences."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_notification_targets(self, building_id: int) -> list[AdminNotificationTarget]:
        stmt = (
            select(AdminProfile)
            .join(BuildingAdmin, BuildingAdmin.admin_profile_id == AdminProfile.id)
            .where(BuildingAdmin.building_id == building_id)
            .order_by(AdminProfile.id)
        )
        result = await self.session.execute(stmt)
        return [self._to_target(profile) for profile in result.scalars().all()]

    @staticmethod
    def _to_target(profile: AdminProfile) -> AdminNotificationTarget:
        # Missing keys fall back to the defaults
        prefs = {**DEFAULT_NOTIFICATION_PREFERENCES, **(profile.notification_preferences or {})}
        return AdminNotificationTarget(
            admin_id=profile.id,
            full_name=profile.full_name,
            email=profile.notification_email or None,
            phone=profile.notification_phone or None,
            notify_emergency=bool(prefs["emergency"]),
            notify_high=bool(prefs["high"]),
            notify_maintenance=bool(prefs["maintenance"]),
            notify_general=bool(prefs["general"]),
            language=profile.language or "es",
        )
