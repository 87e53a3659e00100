"""Unknown sender attempt repository."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.persistence.models.unknown_sender import UnknownSenderAttempt
from app.persistence.repositories.base import BaseRepository, dialect_insert


class UnknownSenderRepository(BaseRepository[UnknownSenderAttempt]):
    """Repository for UnknownSenderAttempt entities."""

    def __init__(self, session: AsyncSession):
        """Initialize unknown sender repository."""
        super().__init__(UnknownSenderAttempt, session)

    async def record_if_absent(self, building_id: int, external_message_id: str, from_address: str) -> bool:
        """Record an unknown-sender message by provider id.

        Returns:
            True if this delivery recorded it, False if it was seen before
        """
        stmt = (
            dialect_insert(self.session, UnknownSenderAttempt)
            .values(
                building_id=building_id,
                external_message_id=external_message_id,
                from_address=from_address,
                created_at=datetime.utcnow(),
            )
            .on_conflict_do_nothing(index_elements=["external_message_id"])
            .returning(UnknownSenderAttempt.id)
        )
        result = await self.session.execute(stmt)
        inserted = result.scalar_one_or_none() is not None
        await self.session.commit()
        return inserted
