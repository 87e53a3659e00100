"""Conversation repository."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.persistence.models.conversation import (
    ACTIVE_CONVERSATION_PREDICATE,
    CONVERSATION_ACTIVE,
    Conversation,
)
from app.persistence.repositories.base import BaseRepository, dialect_insert


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for Conversation entities."""

    def __init__(self, session: AsyncSession):
        """Initialize conversation repository."""
        super().__init__(Conversation, session)

    async def get_active(
        self, building_id: int, resident_id: int, channel: str
    ) -> Conversation | None:
        """Get the active conversation for a (building, resident, channel) triple."""
        stmt = (
            select(Conversation)
            .where(
                Conversation.building_id == building_id,
                Conversation.resident_id == resident_id,
                Conversation.channel == channel,
                Conversation.status == CONVERSATION_ACTIVE,
            )
            .order_by(Conversation.id)
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def insert_active_if_absent(
        self, building_id: int, resident_id: int, channel: str
    ) -> bool:
        """Insert an active conversation unless one already exists.

        Uses ON CONFLICT DO NOTHING against the partial unique index, so a
        concurrent insert for the same triple is a silent no-op instead of an
        IntegrityError.

        Returns:
            True if this call inserted the row
        """
        now = datetime.utcnow()
        stmt = (
            dialect_insert(self.session, Conversation)
            .values(
                building_id=building_id,
                resident_id=resident_id,
                channel=channel,
                status=CONVERSATION_ACTIVE,
                last_message_at=now,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(
                index_elements=["building_id", "resident_id", "channel"],
                index_where=ACTIVE_CONVERSATION_PREDICATE,
            )
            .returning(Conversation.id)
        )
        result = await self.session.execute(stmt)
        inserted_id = result.scalar_one_or_none()
        await self.session.commit()
        return inserted_id is not None

    async def touch(self, conversation: Conversation, at: datetime | None = None) -> Conversation:
        """Refresh the conversation's last activity timestamp."""
        now = at or datetime.utcnow()
        conversation.last_message_at = now
        conversation.updated_at = now
        await self.session.commit()
        return conversation
