"""Conversation service for managing conversations and messages."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models.classification import ClassificationResult
from app.domain.models.inbound import InboundMessage
from app.persistence.models.building import Building
from app.persistence.models.conversation import SENDER_AI, Conversation, Message
from app.persistence.models.resident import Resident
from app.persistence.repositories.conversation_repository import ConversationRepository
from app.persistence.repositories.message_repository import MessageRepository

logger = logging.getLogger(__name__)

# Re-reads after a lost insert race; a conversation closed mid-race needs one more round
_MAX_UPSERT_ROUNDS = 3


class ConversationService:
    """Service for conversation and message management."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize conversation service."""
        self.session = session
        self.conversation_repo = ConversationRepository(session)
        self.message_repo = MessageRepository(session)

    async def get_or_create_active_conversation(
        self, building: Building, resident: Resident, channel: str
    ) -> Conversation:
        """Find or create the single active conversation for the triple.

        Safe under concurrent calls for the same triple: the insert is a
        no-op when another request created the row first, and the row is
        re-read either way. Closed conversations are never reused.

        Args:
            building: Resolved building
            resident: Resolved resident
            channel: Channel the message arrived on (whatsapp, sms)

        Returns:
            The active conversation, with last activity refreshed
        """
        conversation = await self.conversation_repo.get_active(building.id, resident.id, channel)

        rounds = 0
        while conversation is None:
            rounds += 1
            if rounds > _MAX_UPSERT_ROUNDS:
                raise RuntimeError(
                    f"Could not resolve active conversation for building={building.id} "
                    f"resident={resident.id} channel={channel}"
                )
            inserted = await self.conversation_repo.insert_active_if_absent(
                building.id, resident.id, channel
            )
            if not inserted:
                logger.info(
                    "Active conversation created concurrently, re-reading",
                    extra={"building_id": building.id, "resident_id": resident.id, "channel": channel},
                )
            conversation = await self.conversation_repo.get_active(building.id, resident.id, channel)

        return await self.conversation_repo.touch(conversation)

    async def find_prior_delivery(
        self, building: Building, resident: Resident, external_id: str
    ) -> Message | None:
        """The resident message already logged under this provider id, in any conversation."""
        return await self.message_repo.get_resident_message_by_external_id(
            building.id, resident.id, external_id
        )

    async def claim_inbound_message(
        self,
        conversation: Conversation,
        resident: Resident,
        inbound: InboundMessage,
        classification: ClassificationResult,
        requires_human_review: bool,
    ) -> Message | None:
        """Log the resident's message, unless another delivery already did.

        The unique index on resident external message ids spans every
        conversation, so concurrent deliveries and redeliveries after a
        conversation was closed are both told apart here.

        Returns:
            The stored message, or None when this delivery lost the claim
        """
        metadata: dict[str, Any] = classification.to_metadata()
        if inbound.profile_name:
            metadata["profileName"] = inbound.profile_name

        message_id = await self.message_repo.insert_resident_message_if_absent(
            conversation_id=conversation.id,
            sender_id=resident.id,
            content=inbound.body,
            channel=inbound.channel,
            external_message_id=inbound.external_id,
            intent=classification.intent,
            priority=classification.priority.value,
            route_to=classification.route_to.value,
            requires_human_review=requires_human_review,
            media_url=inbound.media_url,
            media_type=inbound.media_type,
            message_metadata=metadata,
            created_at=inbound.received_at,
        )
        if message_id is None:
            logger.info(
                f"Inbound message {inbound.external_id} already claimed",
                extra={"conversation_id": conversation.id},
            )
            return None
        return await self.message_repo.get_by_id(None, message_id)

    async def add_message(
        self,
        conversation: Conversation,
        sender_type: str,
        content: str,
        channel: str,
        **fields: Any,
    ) -> Message:
        """Append a message to a conversation.

        Args:
            conversation: Target conversation
            sender_type: resident, ai or admin
            content: Message text
            channel: Channel the message travelled on
            **fields: Optional columns (external_message_id, message_metadata, ...)

        Returns:
            Created message
        """
        return await self.message_repo.create(
            None,
            conversation_id=conversation.id,
            sender_type=sender_type,
            content=content,
            channel=channel,
            **fields,
        )
