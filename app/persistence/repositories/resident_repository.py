"""Resident repository."""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.persistence.models.building import Unit
from app.persistence.models.resident import Resident
from app.persistence.repositories.base import BaseRepository


class ResidentRepository(BaseRepository[Resident]):
    """Repository for Resident entities."""

    def __init__(self, session: AsyncSession):
        """Initialize resident repository."""
        super().__init__(Resident, session)

    async def get_by_address(self, building_id: int, address: str) -> Resident | None:
        """Find a resident by either stored number.

        Matches the on-file phone or the WhatsApp number, since a resident's
        messaging identity may differ from their primary phone. The lowest id
        wins when several residents share a number.
        """
        stmt = (
            select(Resident)
            .where(
                Resident.building_id == building_id,
                or_(Resident.phone == address, Resident.whatsapp_number == address),
            )
            .order_by(Resident.id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_unit(self, building_id: int, unit_id: int) -> Unit | None:
        stmt = select(Unit).where(Unit.id == unit_id, Unit.building_id == building_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_unit_counterpart(self, building_id: int, unit_id: int, role: str) -> Resident | None:
        """Get the unit's owner (role="owner") or current renter (role="renter")."""
        unit = await self.get_unit(building_id, unit_id)
        if unit is None:
            return None
        counterpart_id = unit.owner_id if role == "owner" else unit.current_renter_id
        if counterpart_id is None:
            return None
        return await self.get_by_id(building_id, counterpart_id)
