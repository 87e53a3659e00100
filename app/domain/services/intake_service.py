"""Intake pipeline for inbound resident messages."""

import asyncio
import logging
import time
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.building_context import set_building_context
from app.domain.models.classification import ClassificationResult, Intent
from app.domain.models.inbound import InboundMessage
from app.domain.prompts.classification import BuildingPromptContext, KnowledgeSnippet
from app.domain.services.classification_service import Classifier
from app.domain.services.conversation_service import SENDER_AI, ConversationService
from app.domain.services.forwarding_service import ForwardingService
from app.domain.services.identity_resolver import IdentityResolver, unknown_sender_reply
from app.domain.services.outbound_dispatcher import DispatchResult, OutboundDispatcher
from app.domain.services.routing_engine import RoutingDecision, decide
from app.domain.services.ticket_service import TicketService, format_ticket_status
from app.infrastructure.notifications import AdminEvent, NotificationService
from app.infrastructure.sendgrid_client import SendGridClient
from app.persistence.models.building import Building
from app.persistence.models.conversation import Conversation, Message
from app.persistence.models.maintenance_request import MaintenanceRequest
from app.persistence.models.notification import NotificationType
from app.persistence.models.resident import Resident
from app.persistence.repositories.knowledge_base_repository import KnowledgeBaseRepository
from app.persistence.repositories.resident_repository import ResidentRepository
from app.settings import settings

logger = logging.getLogger(__name__)

STATUS_PROCESSED = "processed"
STATUS_UNKNOWN_TENANT = "unknown_tenant"
STATUS_UNKNOWN_SENDER = "unknown_sender"
STATUS_DUPLICATE = "duplicate"

EXCERPT_LENGTH = 200


@dataclass
class IntakeResult:
    """Result of processing one inbound message."""

    status: str
    conversation_id: int | None = None
    message_id: int | None = None
    ticket_id: int | None = None
    reply_sent: bool = False
    forwards_sent: int = 0
    notifications_sent: int = 0


def event_type_for(classification: ClassificationResult) -> str:
    if classification.intent == Intent.MAINTENANCE_REQUEST:
        return NotificationType.MAINTENANCE_REQUEST
    if classification.intent == Intent.EMERGENCY:
        return NotificationType.EMERGENCY
    return NotificationType.NEW_MESSAGE


class IntakeService:
    """Runs one inbound message through resolution, classification and routing.

    Ticket creation happens first and on its own; the resident reply, role
    forwarding and admin fanout then run concurrently and fail independently.
    """

    def __init__(
        self,
        session: AsyncSession,
        classifier: Classifier,
        dispatcher: OutboundDispatcher,
        email_client: SendGridClient | None = None,
        dashboard_base_url: str | None = None,
    ) -> None:
        """Initialize intake service."""
        self.session = session
        self.classifier = classifier
        self.dispatcher = dispatcher
        self.dashboard_base_url = (dashboard_base_url or settings.dashboard_base_url).rstrip("/")
        self.resolver = IdentityResolver(session)
        self.conversation_service = ConversationService(session)
        self.ticket_service = TicketService(session)
        self.forwarding_service = ForwardingService(session, dispatcher)
        self.notification_service = NotificationService(session, dispatcher, email_client)
        self.resident_repo = ResidentRepository(session)
        self.knowledge_repo = KnowledgeBaseRepository(session)

    async def process(self, inbound: InboundMessage) -> IntakeResult:
        """Process an inbound message.

        Args:
            inbound: Normalized inbound message

        Returns:
            IntakeResult describing what happened

        Raises:
            SQLAlchemyError: On persistence failures outside the isolated branches
        """
        start_time = time.time()

        building = await self.resolver.resolve_tenant(inbound.to_address)
        if building is None:
            return IntakeResult(status=STATUS_UNKNOWN_TENANT)
        set_building_context(building.id)

        resident = await self.resolver.resolve_resident(building, inbound.from_address)
        if resident is None:
            return await self._reject_unknown_sender(building, inbound)

        if not resident.is_opted_in(inbound.channel):
            logger.warning(
                f"Resident {resident.id} has not opted in to {inbound.channel}, processing anyway"
            )

        prior = await self.conversation_service.find_prior_delivery(building, resident, inbound.external_id)
        if prior is not None:
            logger.info(f"Duplicate delivery of {inbound.external_id}, skipping")
            return IntakeResult(
                status=STATUS_DUPLICATE, conversation_id=prior.conversation_id, message_id=prior.id
            )

        conversation = await self.conversation_service.get_or_create_active_conversation(
            building, resident, inbound.channel
        )

        language = resident.preferred_language or building.preferred_language or "es"
        classification = await self.classifier.classify(
            inbound.body,
            resident.role,
            language,
            await self._prompt_context(building),
        )
        decision = decide(classification, resident.role, language)

        message = await self.conversation_service.claim_inbound_message(
            conversation, resident, inbound, classification, decision.requires_human_review
        )
        if message is None:
            return IntakeResult(status=STATUS_DUPLICATE, conversation_id=conversation.id)

        ticket = await self._materialize_ticket(
            classification, building, resident, conversation, message, inbound
        )

        reply_text = decision.auto_reply_text
        if classification.intent == Intent.STATUS_INQUIRY:
            tickets, total = await self.ticket_service.list_active_tickets(resident)
            reply_text = format_ticket_status(tickets, total, language)

        unit_number = await self._unit_number(resident)
        targets = await self.forwarding_service.resolve_targets(resident, decision)
        event = AdminEvent(
            priority=decision.priority,
            type=event_type_for(classification),
            resident_name=resident.full_name,
            unit=unit_number,
            excerpt=self._excerpt(inbound),
            conversation_link=self._conversation_link(conversation),
        )

        reply_result, forwards_sent, notifications_sent = await asyncio.gather(
            self.dispatcher.send(
                to_address=inbound.from_address,
                from_address=inbound.to_address,
                body=reply_text,
                channel=inbound.channel,
            ),
            self.forwarding_service.forward(
                building, resident, targets, inbound.body, unit_number, important=decision.shared_with_admin
            ),
            self._notify_admins(building, event, decision),
            return_exceptions=True,
        )

        reply_sent = await self._record_reply(conversation, inbound, reply_text, reply_result, decision)
        forwards_sent = self._count_or_log("forwarding", forwards_sent)
        notifications_sent = self._count_or_log("admin notification", notifications_sent)

        await self.notification_service.record_dashboard_notification(
            building,
            conversation_id=conversation.id,
            resident_name=resident.full_name,
            body=inbound.body,
            channel=inbound.channel,
            priority=decision.priority,
            requires_review=decision.requires_human_review,
            notification_type=event.type,
        )

        logger.info(
            f"Inbound message processed in {int((time.time() - start_time) * 1000)}ms",
            extra={
                "conversation_id": conversation.id,
                "intent": classification.intent,
                "priority": decision.priority.value,
                "classification_source": classification.source,
                "ticket_id": ticket.id if ticket else None,
                "reply_sent": reply_sent,
                "forwards_sent": forwards_sent,
                "notifications_sent": notifications_sent,
            },
        )
        return IntakeResult(
            status=STATUS_PROCESSED,
            conversation_id=conversation.id,
            message_id=message.id,
            ticket_id=ticket.id if ticket else None,
            reply_sent=reply_sent,
            forwards_sent=forwards_sent,
            notifications_sent=notifications_sent,
        )

    async def _reject_unknown_sender(self, building: Building, inbound: InboundMessage) -> IntakeResult:
        if not await self.resolver.first_unknown_delivery(building, inbound.external_id, inbound.from_address):
            logger.info(f"Unknown sender already answered for {inbound.external_id}, skipping")
            return IntakeResult(status=STATUS_UNKNOWN_SENDER)
        result = await self.dispatcher.send(
            to_address=inbound.from_address,
            from_address=inbound.to_address,
            body=unknown_sender_reply(building),
            channel=inbound.channel,
        )
        return IntakeResult(status=STATUS_UNKNOWN_SENDER, reply_sent=result.success)

    async def _prompt_context(self, building: Building) -> BuildingPromptContext:
        entries = await self.knowledge_repo.list_active(building.id)
        return BuildingPromptContext(
            building_name=building.name,
            knowledge=tuple(
                KnowledgeSnippet(question=e.question, answer=e.answer, category=e.category)
                for e in entries
            ),
        )

    async def _materialize_ticket(
        self,
        classification: ClassificationResult,
        building: Building,
        resident: Resident,
        conversation: Conversation,
        message: Message,
        inbound: InboundMessage,
    ) -> MaintenanceRequest | None:
        try:
            return await self.ticket_service.maybe_create_ticket(
                classification, resident, conversation, message, media_url=inbound.media_url
            )
        except Exception as e:
            logger.error(f"Ticket creation failed: {type(e).__name__}: {e}", exc_info=True)
            await self.session.rollback()
            # Rollback expires loaded rows; reload the ones the rest of the pipeline reads
            for instance in (building, resident, conversation, message):
                await self.session.refresh(instance)
            return None

    async def _unit_number(self, resident: Resident) -> str | None:
        if resident.unit_id is None:
            return None
        unit = await self.resident_repo.get_unit(resident.building_id, resident.unit_id)
        return unit.unit_number if unit else None

    async def _notify_admins(self, building: Building, event: AdminEvent, decision: RoutingDecision) -> int:
        if not decision.notify_admins:
            return 0
        return await self.notification_service.notify_admins(building, event)

    async def _record_reply(
        self,
        conversation: Conversation,
        inbound: InboundMessage,
        reply_text: str,
        reply_result: DispatchResult | BaseException,
        decision: RoutingDecision,
    ) -> bool:
        if isinstance(reply_result, BaseException):
            logger.error(f"Reply dispatch raised: {reply_result}", exc_info=reply_result)
            return False
        if not reply_result.success:
            return False

        await self.conversation_service.add_message(
            conversation,
            SENDER_AI,
            reply_text,
            inbound.channel,
            external_message_id=reply_result.message_id,
            message_metadata={
                "substantive": decision.substantive_reply,
                "dispatchAttempts": reply_result.attempts,
            },
        )
        return True

    @staticmethod
    def _count_or_log(branch: str, result: int | BaseException) -> int:
        if isinstance(result, BaseException):
            logger.error(f"{branch.capitalize()} branch failed: {result}", exc_info=result)
            return 0
        return result

    def _conversation_link(self, conversation: Conversation) -> str:
        return f"{self.dashboard_base_url}/dashboard/conversations?conversation={conversation.id}"

    @staticmethod
    def _excerpt(inbound: InboundMessage) -> str:
        if inbound.body:
            return inbound.body[:EXCERPT_LENGTH]
        return "[media]"
