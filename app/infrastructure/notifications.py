"""Notification service for admin alerts (Email + WhatsApp) and the in-app feed."""

import asyncio
import html
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models.classification import Priority
from app.domain.services.outbound_dispatcher import OutboundDispatcher
from app.infrastructure.sendgrid_client import SendGridClient
from app.persistence.models.building import Building
from app.persistence.models.notification import Notification, NotificationType
from app.persistence.repositories.admin_repository import AdminNotificationTarget, AdminRepository
from app.persistence.repositories.notification_repository import NotificationRepository

logger = logging.getLogger(__name__)

URGENT_PRIORITIES = (Priority.EMERGENCY, Priority.HIGH)

_PRIORITY_EMOJI = {
    Priority.EMERGENCY: "🚨",
    Priority.HIGH: "⚠️",
    Priority.MEDIUM: "ℹ️",
    Priority.LOW: "📝",
}

_PRIORITY_TEXT = {
    "es": {
        Priority.EMERGENCY: "EMERGENCIA",
        Priority.HIGH: "PRIORIDAD ALTA",
        Priority.MEDIUM: "Prioridad Media",
        Priority.LOW: "Prioridad Baja",
    },
    "en": {
        Priority.EMERGENCY: "EMERGENCY",
        Priority.HIGH: "HIGH PRIORITY",
        Priority.MEDIUM: "Medium Priority",
        Priority.LOW: "Low Priority",
    },
}


@dataclass(frozen=True)
class AdminEvent:
    """What admins are told about one inbound message."""

    priority: Priority
    type: str  # NotificationType value
    resident_name: str
    unit: str | None
    excerpt: str
    conversation_link: str


def should_notify_admin(admin: AdminNotificationTarget, priority: Priority, event_type: str) -> bool:
    """Per-admin preference predicate.

    Emergency and high priority are gated only by their own flags, so they
    reach admins who turned general notifications off.
    """
    if priority == Priority.EMERGENCY and admin.notify_emergency:
        return True
    if priority == Priority.HIGH and admin.notify_high:
        return True
    if event_type == NotificationType.MAINTENANCE_REQUEST and admin.notify_maintenance:
        return True
    if priority in (Priority.MEDIUM, Priority.LOW) and admin.notify_general:
        return True
    return False


def _lang(language: str) -> str:
    return "en" if language == "en" else "es"


def build_email(admin: AdminNotificationTarget, event: AdminEvent) -> tuple[str, str, str]:
    """Build (subject, html, text) for an admin email."""
    lang = _lang(admin.language)
    emoji = _PRIORITY_EMOJI[event.priority]
    priority_text = _PRIORITY_TEXT[lang][event.priority]
    is_maintenance = event.type == NotificationType.MAINTENANCE_REQUEST

    if lang == "es":
        subject = f"{emoji} {priority_text}: Mensaje de {event.resident_name}"
        greeting = f"Hola {admin.full_name},"
        labels = ("Residente", "Unidad", "Tipo", "Mensaje")
        type_text = "Solicitud de Mantenimiento" if is_maintenance else "Mensaje"
        cta = "📱 Ver Conversación"
        closing = "Este mensaje requiere tu atención. Por favor responde lo antes posible."
    else:
        subject = f"{emoji} {priority_text}: Message from {event.resident_name}"
        greeting = f"Hello {admin.full_name},"
        labels = ("Resident", "Unit", "Type", "Message")
        type_text = "Maintenance Request" if is_maintenance else "Message"
        cta = "📱 View Conversation"
        closing = "This message requires your attention. Please respond as soon as possible."

    rows = [f"<p><strong>{labels[0]}:</strong> {html.escape(event.resident_name)}</p>"]
    text_rows = [f"{labels[0]}: {event.resident_name}"]
    if event.unit:
        rows.append(f"<p><strong>{labels[1]}:</strong> {html.escape(event.unit)}</p>")
        text_rows.append(f"{labels[1]}: {event.unit}")
    rows.append(f"<p><strong>{labels[2]}:</strong> {type_text}</p>")
    text_rows.append(f"{labels[2]}: {type_text}")

    html_body = (
        f"<h1>{emoji} {priority_text}</h1>"
        f"<p>{html.escape(greeting)}</p>"
        + "".join(rows)
        + f"<blockquote><strong>{labels[3]}:</strong><br>{html.escape(event.excerpt)}</blockquote>"
        f'<p><a href="{html.escape(event.conversation_link)}">{cta}</a></p>'
        f"<p>{closing}</p>"
    )
    text_body = "\n".join(
        [greeting, *text_rows, f"{labels[3]}: {event.excerpt}", event.conversation_link, closing]
    )
    return subject, html_body, text_body


def build_whatsapp_alert(event: AdminEvent, language: str) -> str:
    """Short WhatsApp alert for urgent events."""
    emoji = _PRIORITY_EMOJI[event.priority]
    if _lang(language) == "es":
        unit = f" - Unidad {event.unit}" if event.unit else ""
        return (
            f"{emoji} *URGENTE: {event.resident_name}*{unit}\n\n"
            f"*Mensaje:* {event.excerpt}\n\n"
            f"*Prioridad:* {event.priority.value.upper()}\n\n"
            f"Responde en: {event.conversation_link}"
        )
    unit = f" - Unit {event.unit}" if event.unit else ""
    return (
        f"{emoji} *URGENT: {event.resident_name}*{unit}\n\n"
        f"*Message:* {event.excerpt}\n\n"
        f"*Priority:* {event.priority.value.upper()}\n\n"
        f"Respond at: {event.conversation_link}"
    )


class NotificationService:
    """Service for sending admin notifications."""

    def __init__(
        self,
        session: AsyncSession,
        dispatcher: OutboundDispatcher,
        email_client: SendGridClient | None = None,
    ) -> None:
        """Initialize notification service.

        Args:
            session: Database session
            dispatcher: Outbound dispatcher used for WhatsApp alerts
            email_client: SendGrid client; None disables email with a logged skip
        """
        self.session = session
        self.admin_repo = AdminRepository(session)
        self.notification_repo = NotificationRepository(session)
        self.dispatcher = dispatcher
        self.email_client = email_client

    async def notify_admins(self, building: Building, event: AdminEvent) -> int:
        """Notify eligible building admins of an event.

        Each (admin x channel) attempt runs as its own task; a failure in one
        never affects the others.

        Args:
            building: Building the event belongs to
            event: Event details

        Returns:
            Number of notifications successfully sent
        """
        admins = await self.admin_repo.list_notification_targets(building.id)
        if not admins:
            logger.warning(f"No admins found for building {building.id}")
            return 0

        attempts: list[tuple[str, str]] = []
        tasks = []
        for admin in admins:
            if not should_notify_admin(admin, event.priority, event.type):
                logger.info(f"Skipping admin {admin.admin_id} (preferences)")
                continue

            if admin.email:
                if self.email_client is None:
                    logger.warning(f"SendGrid not configured, skipping email to admin {admin.admin_id}")
                else:
                    attempts.append(("email", admin.email))
                    tasks.append(self._send_email(admin, event))

            if event.priority in URGENT_PRIORITIES and admin.phone and building.whatsapp_number:
                attempts.append(("whatsapp", admin.phone))
                tasks.append(self._send_whatsapp(admin, event, building.whatsapp_number))

        if not tasks:
            return 0

        results = await asyncio.gather(*tasks, return_exceptions=True)

        sent = 0
        for (channel, address), result in zip(attempts, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Failed to send {channel} notification to {address}: {type(result).__name__}: {result}",
                    exc_info=result,
                )
            elif result:
                sent += 1
            else:
                logger.warning(f"{channel} notification to {address} was not delivered")

        logger.info(
            "Admin notifications dispatched",
            extra={
                "building_id": building.id,
                "priority": event.priority.value,
                "attempted": len(tasks),
                "sent": sent,
            },
        )
        return sent

    async def _send_email(self, admin: AdminNotificationTarget, event: AdminEvent) -> bool:
        subject, html_body, text_body = build_email(admin, event)
        await self.email_client.send_email(
            to_email=admin.email,
            subject=subject,
            html_content=html_body,
            text_content=text_body,
        )
        return True

    async def _send_whatsapp(
        self, admin: AdminNotificationTarget, event: AdminEvent, from_number: str
    ) -> bool:
        result = await self.dispatcher.send(
            to_address=admin.phone,
            from_address=from_number,
            body=build_whatsapp_alert(event, admin.language),
            channel="whatsapp",
        )
        return result.success

    async def record_dashboard_notification(
        self,
        building: Building,
        conversation_id: int,
        resident_name: str,
        body: str,
        channel: str,
        priority: Priority,
        requires_review: bool,
        notification_type: str = NotificationType.NEW_MESSAGE,
    ) -> Notification:
        """Write the in-app notification for a processed inbound message."""
        if requires_review:
            title = f"Mensaje requiere revisión ({priority.value})"
        else:
            title = f"Nuevo Mensaje ({channel.upper()})"
        return await self.notification_repo.create(
            building.id,
            notification_type=notification_type,
            title=title,
            message=f"{resident_name}: {body[:100]}",
            link=f"/dashboard/conversations?conversation={conversation_id}",
            is_read=False,
        )
