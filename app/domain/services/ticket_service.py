"""Ticket materializer: maintenance requests created from resident messages."""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models.classification import ClassificationResult, Intent
from app.persistence.models.conversation import Conversation, Message
from app.persistence.models.maintenance_request import MaintenanceRequest
from app.persistence.models.resident import Resident
from app.persistence.repositories.maintenance_request_repository import MaintenanceRequestRepository

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "general"
STATUS_SUMMARY_LIMIT = 5

_PRIORITY_RANK = {"emergency": 4, "high": 3, "medium": 2, "low": 1}

_DEFAULT_TITLES = {"es": "Solicitud de Mantenimiento", "en": "Maintenance Request"}

_STATUS_LABELS = {
    "es": {"open": "Abierta", "in_progress": "En Progreso", "resolved": "Resuelta", "closed": "Cerrada"},
    "en": {"open": "Open", "in_progress": "In Progress", "resolved": "Resolved", "closed": "Closed"},
}

_PRIORITY_LABELS = {
    "es": {"emergency": "🚨 Emergencia", "high": "⚠️ Alta", "medium": "📌 Media", "low": "📝 Baja"},
    "en": {"emergency": "🚨 Emergency", "high": "⚠️ High", "medium": "📌 Medium", "low": "📝 Low"},
}


def _extracted_str(data: dict, *keys: str) -> str | None:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


class TicketService:
    """Creates maintenance tickets and summarizes a resident's open ones."""

    def __init__(self, session: AsyncSession) -> None:
        self.ticket_repo = MaintenanceRequestRepository(session)

    async def maybe_create_ticket(
        self,
        classification: ClassificationResult,
        resident: Resident,
        conversation: Conversation,
        source_message: Message,
        media_url: str | None = None,
    ) -> MaintenanceRequest | None:
        """Create a ticket when the message is a maintenance request.

        At most one ticket exists per source message; a repeated call for the
        same message returns None.

        Args:
            classification: Classification of the inbound message
            resident: Sender
            conversation: Conversation the message belongs to
            source_message: Stored inbound message
            media_url: Inbound photo URL, attached to the ticket as-is

        Returns:
            The created ticket, or None
        """
        if classification.intent != Intent.MAINTENANCE_REQUEST:
            return None

        data = classification.extracted_data
        category = _extracted_str(data, "category", "maintenanceCategory") or DEFAULT_CATEGORY
        location = _extracted_str(data, "location")
        language = resident.preferred_language if resident.preferred_language in _DEFAULT_TITLES else "es"
        title = (
            _DEFAULT_TITLES[language]
            if category == DEFAULT_CATEGORY
            else f"{_DEFAULT_TITLES[language]}: {category.replace('_', ' ')}"
        )

        ticket = await self.ticket_repo.create_for_message(
            conversation.building_id,
            unit_id=resident.unit_id,
            resident_id=resident.id,
            conversation_id=conversation.id,
            source_message_id=source_message.id,
            title=title[:255],
            category=category,
            location=location,
            priority=classification.priority.value,
            description=source_message.content or "",
            extracted_by_ai=True,
            photo_urls=[media_url] if media_url else None,
        )

        if ticket is None:
            logger.info(f"Ticket for message {source_message.id} already exists, skipping")
            return None

        logger.info(
            "Maintenance request created",
            extra={
                "ticket_id": ticket.id,
                "category": category,
                "priority": ticket.priority,
                "conversation_id": conversation.id,
                "has_photo": bool(media_url),
            },
        )
        return ticket

    async def list_active_tickets(
        self, resident: Resident, limit: int = STATUS_SUMMARY_LIMIT
    ) -> tuple[list[MaintenanceRequest], int]:
        """Resident's open/in-progress tickets, most urgent then most recent first.

        Returns:
            (up to `limit` tickets, total number of active tickets)
        """
        tickets = await self.ticket_repo.list_active_for_resident(resident.building_id, resident.id)
        # Repository order is newest first; sort is stable so recency breaks priority ties
        ranked = sorted(tickets, key=lambda t: _PRIORITY_RANK.get(t.priority, 0), reverse=True)
        return ranked[:limit], len(tickets)


def format_ticket_status(tickets: list[MaintenanceRequest], total: int, language: str) -> str:
    """Render the status summary sent back for a status inquiry."""
    lang = language if language in _STATUS_LABELS else "es"

    if not tickets:
        if lang == "es":
            return "No tienes solicitudes de mantenimiento activas en este momento."
        return "You have no active maintenance requests at this time."

    shown = len(tickets)
    if lang == "es":
        header = (
            f"📋 Mostrando {shown} de {total} solicitudes activas (más urgentes primero):\n\n"
            if total > shown
            else f"📋 Tienes {shown} solicitud(es) activa(s):\n\n"
        )
    else:
        header = (
            f"📋 Showing {shown} of {total} active requests (most urgent first):\n\n"
            if total > shown
            else f"📋 You have {shown} active request(s):\n\n"
        )

    entries = []
    for idx, ticket in enumerate(tickets, start=1):
        status = _STATUS_LABELS[lang].get(ticket.status, ticket.status)
        priority = _PRIORITY_LABELS[lang].get(ticket.priority, ticket.priority)
        title = ticket.title or (ticket.description or "")[:50]
        reported: datetime = ticket.reported_at or ticket.created_at
        if lang == "es":
            entries.append(
                f"{idx}. {title}\n   Estado: {status}\n   Prioridad: {priority}\n"
                f"   Reportado: {reported.strftime('%d/%m/%Y')}"
            )
        else:
            entries.append(
                f"{idx}. {title}\n   Status: {status}\n   Priority: {priority}\n"
                f"   Reported: {reported.strftime('%m/%d/%Y')}"
            )

    if total > shown:
        extra = total - shown
        footer = (
            f"\n\n⚠️ Tienes {extra} solicitud(es) adicional(es).\n💬 Contacta a la administración para ver todas."
            if lang == "es"
            else f"\n\n⚠️ You have {extra} additional request(s).\n💬 Contact administration to view all."
        )
    else:
        footer = (
            "\n\n💬 Para más información, contacta a la administración."
            if lang == "es"
            else "\n\n💬 For more information, contact the administration."
        )

    return header + "\n\n".join(entries) + footer
