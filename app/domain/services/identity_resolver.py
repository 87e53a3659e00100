"""Resolve the building and resident behind an inbound message."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.phone import normalize_address
from app.persistence.models.building import Building
from app.persistence.models.resident import Resident
from app.persistence.repositories.building_repository import BuildingRepository
from app.persistence.repositories.resident_repository import ResidentRepository
from app.persistence.repositories.unknown_sender_repository import UnknownSenderRepository

logger = logging.getLogger(__name__)

UNKNOWN_SENDER_REPLIES = {
    "es": (
        "Hola! No reconocemos tu número en nuestro sistema. "
        "Por favor contacta a la administración de {building_name}."
    ),
    "en": (
        "Hello! We don't recognize your number in our system. "
        "Please contact the administration of {building_name}."
    ),
}


def unknown_sender_reply(building: Building) -> str:
    """Fixed "not recognized" reply in the building's language."""
    template = UNKNOWN_SENDER_REPLIES.get(building.preferred_language, UNKNOWN_SENDER_REPLIES["es"])
    return template.format(building_name=building.name)


class IdentityResolver:
    """Maps inbound addresses to a building and one of its residents."""

    def __init__(self, session: AsyncSession) -> None:
        self.building_repo = BuildingRepository(session)
        self.resident_repo = ResidentRepository(session)
        self.unknown_sender_repo = UnknownSenderRepository(session)

    async def resolve_tenant(self, to_address: str) -> Building | None:
        """Find the building that owns the destination address."""
        address = normalize_address(to_address)
        if not address:
            return None
        building = await self.building_repo.get_by_inbound_address(address)
        if building is None:
            logger.warning(f"No building configured for inbound address {address}")
        return building

    async def resolve_resident(self, building: Building, from_address: str) -> Resident | None:
        """Find the sending resident by primary phone or WhatsApp number."""
        address = normalize_address(from_address)
        if not address:
            return None
        resident = await self.resident_repo.get_by_address(building.id, address)
        if resident is None:
            logger.info(
                "Unknown sender for building",
                extra={"building_id": building.id, "from_address": address},
            )
        return resident

    async def first_unknown_delivery(self, building: Building, external_id: str, from_address: str) -> bool:
        """Record a message from an unrecognized number; False on a redelivery."""
        return await self.unknown_sender_repo.record_if_absent(
            building.id, external_id, normalize_address(from_address) or from_address
        )
