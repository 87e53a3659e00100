"""Notification repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.persistence.models.notification import Notification
from app.persistence.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository for in-app Notification entities."""

    def __init__(self, session: AsyncSession):
        """Initialize notification repository."""
        super().__init__(Notification, session)

    async def list_unread(self, building_id: int, limit: int = 50) -> list[Notification]:
        """Unread notifications for a building, newest first."""
        stmt = (
            select(Notification)
            .where(Notification.building_id == building_id, Notification.is_read.is_(False))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
