"""Maintenance request repository."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.persistence.models.maintenance_request import ACTIVE_TICKET_STATUSES, MaintenanceRequest
from app.persistence.repositories.base import BaseRepository, dialect_insert


class MaintenanceRequestRepository(BaseRepository[MaintenanceRequest]):
    """Repository for MaintenanceRequest entities."""

    def __init__(self, session: AsyncSession):
        """Initialize maintenance request repository."""
        super().__init__(MaintenanceRequest, session)

    async def create_for_message(self, building_id: int, **data) -> MaintenanceRequest | None:
        """Create a ticket unless the source message already produced one.

        Returns:
            The new ticket, or None when another delivery created it first
        """
        now = datetime.utcnow()
        data.setdefault("reported_at", now)
        data.setdefault("created_at", now)
        data.setdefault("status", "open")
        stmt = (
            dialect_insert(self.session, MaintenanceRequest)
            .values(building_id=building_id, **data)
            .on_conflict_do_nothing(index_elements=["source_message_id"])
            .returning(MaintenanceRequest.id)
        )
        result = await self.session.execute(stmt)
        ticket_id = result.scalar_one_or_none()
        await self.session.commit()
        if ticket_id is None:
            return None
        return await self.get_by_id(building_id, ticket_id)

    async def list_active_for_resident(
        self, building_id: int, resident_id: int
    ) -> list[MaintenanceRequest]:
        """List the resident's open and in-progress tickets, newest first."""
        stmt = (
            select(MaintenanceRequest)
            .where(
                MaintenanceRequest.building_id == building_id,
                MaintenanceRequest.resident_id == resident_id,
                MaintenanceRequest.status.in_(ACTIVE_TICKET_STATUSES),
            )
            .order_by(MaintenanceRequest.created_at.desc(), MaintenanceRequest.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

