"""Role forwarding between a unit's owner and its renter."""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.phone import CHANNEL_WHATSAPP
from app.domain.services.outbound_dispatcher import OutboundDispatcher
from app.domain.services.routing_engine import Recipient, RoutingDecision
from app.persistence.models.building import Building
from app.persistence.models.resident import Resident
from app.persistence.repositories.resident_repository import ResidentRepository

logger = logging.getLogger(__name__)

_FORWARD_TEMPLATES = {
    "es": {
        Recipient.OWNER: "📨 *Mensaje de inquilino - Unidad {unit}*\n\n{body}\n\n_Este mensaje fue enviado por {sender}_",
        Recipient.RENTER: "📨 *Mensaje del propietario - Unidad {unit}*\n\n{body}\n\n_Este mensaje fue enviado por {sender}_",
    },
    "en": {
        Recipient.OWNER: "📨 *Message from renter - Unit {unit}*\n\n{body}\n\n_This message was sent by {sender}_",
        Recipient.RENTER: "📨 *Message from owner - Unit {unit}*\n\n{body}\n\n_This message was sent by {sender}_",
    },
}

# Same wording for either role when the admin is also notified
_IMPORTANT_TEMPLATES = {
    "es": "📨 *Mensaje importante - Unidad {unit}*\n\n{body}\n\n_Mensaje enviado por {sender}_",
    "en": "📨 *Important message - Unit {unit}*\n\n{body}\n\n_Message sent by {sender}_",
}


def forward_text(
    recipient: Recipient, language: str, unit: str, body: str, sender: str, important: bool = False
) -> str:
    lang = language if language in _FORWARD_TEMPLATES else "es"
    template = _IMPORTANT_TEMPLATES[lang] if important else _FORWARD_TEMPLATES[lang][recipient]
    return template.format(unit=unit or "-", body=body, sender=sender)


class ForwardingService:
    """Executes the owner/renter part of a routing decision."""

    def __init__(self, session: AsyncSession, dispatcher: OutboundDispatcher) -> None:
        self.resident_repo = ResidentRepository(session)
        self.dispatcher = dispatcher

    async def resolve_targets(
        self, sender: Resident, decision: RoutingDecision
    ) -> list[tuple[Recipient, Resident]]:
        """Look up the unit counterparts the decision forwards to.

        Skips the sender, anyone not opted in to WhatsApp and anyone without
        a WhatsApp number.
        """
        if not decision.forward_to:
            return []
        if sender.unit_id is None:
            logger.info(f"Resident {sender.id} has no unit, nothing to forward to")
            return []

        targets: list[tuple[Recipient, Resident]] = []
        for recipient in sorted(decision.forward_to, key=lambda r: r.value):
            counterpart = await self.resident_repo.get_unit_counterpart(
                sender.building_id, sender.unit_id, recipient.value
            )
            if counterpart is None:
                logger.info(f"No {recipient.value} on file for unit {sender.unit_id}")
                continue
            if counterpart.id == sender.id:
                continue
            if not counterpart.whatsapp_number or not counterpart.opted_in_whatsapp:
                logger.info(f"{recipient.value.capitalize()} {counterpart.id} can't receive WhatsApp forwards")
                continue
            targets.append((recipient, counterpart))
        return targets

    async def forward(
        self,
        building: Building,
        sender: Resident,
        targets: list[tuple[Recipient, Resident]],
        body: str,
        unit_number: str | None,
        important: bool = False,
    ) -> int:
        """Send the forwards. Needs no database access.

        ``important`` switches to the shared "important message" wording used
        when the admin is notified alongside the counterpart.

        Returns:
            Number of successful forwards
        """
        if not targets or not building.whatsapp_number:
            return 0

        results = await asyncio.gather(
            *(
                self.dispatcher.send(
                    to_address=target.whatsapp_number,
                    from_address=building.whatsapp_number,
                    body=forward_text(
                        recipient, target.preferred_language, unit_number, body, sender.full_name, important
                    ),
                    channel=CHANNEL_WHATSAPP,
                )
                for recipient, target in targets
            ),
            return_exceptions=True,
        )

        sent = 0
        for (recipient, target), result in zip(targets, results):
            if isinstance(result, BaseException):
                logger.error(f"Forward to {recipient.value} {target.id} failed: {result}", exc_info=result)
            elif result.success:
                sent += 1
        logger.info(f"Forwarded message to {sent}/{len(targets)} unit residents")
        return sent
