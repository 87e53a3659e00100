"""Message repository."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.persistence.models.conversation import (
    RESIDENT_MESSAGE_PREDICATE,
    SENDER_RESIDENT,
    Conversation,
    Message,
)
from app.persistence.repositories.base import BaseRepository, dialect_insert


class MessageRepository(BaseRepository[Message]):
    """Repository for Message entities. Messages are append-only."""

    def __init__(self, session: AsyncSession):
        """Initialize message repository."""
        super().__init__(Message, session)

    async def get_resident_message_by_external_id(
        self, building_id: int, resident_id: int, external_message_id: str
    ) -> Message | None:
        """Find a logged inbound message by provider id in any of the resident's conversations.

        Closed conversations are searched too, so a redelivery that arrives
        after the conversation was closed is still recognized.
        """
        stmt = (
            select(Message)
            .join(Conversation, Conversation.id == Message.conversation_id)
            .where(
                Conversation.building_id == building_id,
                Conversation.resident_id == resident_id,
                Message.sender_type == SENDER_RESIDENT,
                Message.external_message_id == external_message_id,
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def insert_resident_message_if_absent(self, **data) -> int | None:
        """Insert a resident message guarded by its provider message id.

        The conflict target is the partial unique index over resident
        messages' external ids, which spans all conversations.

        Returns:
            New message id, or None if the external id was already logged
        """
        data["sender_type"] = SENDER_RESIDENT
        data.setdefault("created_at", datetime.utcnow())
        data.setdefault("requires_human_review", False)
        stmt = (
            dialect_insert(self.session, Message)
            .values(**data)
            .on_conflict_do_nothing(
                index_elements=["external_message_id"],
                index_where=RESIDENT_MESSAGE_PREDICATE,
            )
            .returning(Message.id)
        )
        result = await self.session.execute(stmt)
        message_id = result.scalar_one_or_none()
        await self.session.commit()
        return message_id
