"""Building repository."""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.persistence.models.building import Building


class BuildingRepository:
    """Repository for Building entities.

    Buildings are the tenant root, so lookups here are never building-scoped.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_inbound_address(self, address: str) -> Building | None:
        """Find the building that owns an inbound channel address.

        Args:
            address: Destination address without transport prefix (E.164)

        Returns:
            Building whose WhatsApp or SMS number matches, or None
        """
        stmt = (
            select(Building)
            .where(or_(Building.whatsapp_number == address, Building.sms_number == address))
            .order_by(Building.id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
