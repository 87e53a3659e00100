"""Tests for maintenance ticket creation and status summaries."""

from datetime import datetime, timedelta

from sqlalchemy import func, select

from app.domain.models.inbound import InboundMessage
from app.domain.services.conversation_service import ConversationService
from app.domain.services.ticket_service import TicketService, format_ticket_status
from app.persistence.models.maintenance_request import MaintenanceRequest

from conftest import BUILDING_WHATSAPP, RENTER_PHONE, make_classification

MAINTENANCE = make_classification(
    intent="maintenance_request",
    priority="high",
    extractedData={"category": "plumbing", "location": "cocina"},
)


async def _conversation_and_message(session, seed, external_id="SM0001"):
    service = ConversationService(session)
    conversation = await service.get_or_create_active_conversation(seed.building, seed.renter, "whatsapp")
    inbound = InboundMessage(
        external_id=external_id,
        from_address=RENTER_PHONE,
        to_address=BUILDING_WHATSAPP,
        body="Hay un salidero debajo del fregadero",
        channel="whatsapp",
        received_at=datetime.utcnow(),
    )
    message = await service.claim_inbound_message(conversation, seed.renter, inbound, MAINTENANCE, False)
    return conversation, message


def _ticket(seed, title, priority, status="open", days_ago=0):
    reported = datetime(2026, 3, 15) - timedelta(days=days_ago)
    return MaintenanceRequest(
        building_id=seed.building.id,
        resident_id=seed.renter.id,
        title=title,
        description=title,
        priority=priority,
        status=status,
        reported_at=reported,
        created_at=reported,
    )


class TestMaybeCreateTicket:
    async def test_maintenance_request_creates_ticket(self, db_session, seed):
        conversation, message = await _conversation_and_message(db_session, seed)

        ticket = await TicketService(db_session).maybe_create_ticket(
            MAINTENANCE, seed.renter, conversation, message, media_url="https://api.twilio.com/media/ME1"
        )

        assert ticket is not None
        assert ticket.extracted_by_ai is True
        assert ticket.conversation_id == conversation.id
        assert ticket.source_message_id == message.id
        assert ticket.unit_id == seed.unit.id
        assert ticket.category == "plumbing"
        assert ticket.location == "cocina"
        assert ticket.priority == "high"
        assert ticket.status == "open"
        assert ticket.title == "Solicitud de Mantenimiento: plumbing"
        assert ticket.photo_urls == ["https://api.twilio.com/media/ME1"]

    async def test_repeated_call_creates_nothing(self, db_session, seed):
        conversation, message = await _conversation_and_message(db_session, seed)
        service = TicketService(db_session)

        first = await service.maybe_create_ticket(MAINTENANCE, seed.renter, conversation, message)
        second = await service.maybe_create_ticket(MAINTENANCE, seed.renter, conversation, message)

        assert first is not None
        assert second is None
        count = (await db_session.execute(select(func.count()).select_from(MaintenanceRequest))).scalar_one()
        assert count == 1

    async def test_other_intents_create_nothing(self, db_session, seed):
        conversation, message = await _conversation_and_message(db_session, seed)

        ticket = await TicketService(db_session).maybe_create_ticket(
            make_classification(intent="noise_complaint"), seed.renter, conversation, message
        )

        assert ticket is None

    async def test_missing_category_defaults_to_general(self, db_session, seed):
        conversation, message = await _conversation_and_message(db_session, seed)
        classification = make_classification(intent="maintenance_request", extractedData={})

        ticket = await TicketService(db_session).maybe_create_ticket(
            classification, seed.renter, conversation, message
        )

        assert ticket.category == "general"
        assert ticket.title == "Solicitud de Mantenimiento"
        assert ticket.photo_urls is None


class TestActiveTickets:
    async def test_ranked_by_priority_then_recency(self, db_session, seed):
        db_session.add_all(
            [
                _ticket(seed, "Pintura", "low", days_ago=0),
                _ticket(seed, "Ascensor", "high", days_ago=5),
                _ticket(seed, "Aire", "high", days_ago=1),
                _ticket(seed, "Cerradura", "medium", status="resolved"),
            ]
        )
        await db_session.commit()

        tickets, total = await TicketService(db_session).list_active_tickets(seed.renter)

        assert [t.title for t in tickets] == ["Aire", "Ascensor", "Pintura"]
        assert total == 3

    async def test_limit(self, db_session, seed):
        db_session.add_all([_ticket(seed, f"T{i}", "medium", days_ago=i) for i in range(7)])
        await db_session.commit()

        tickets, total = await TicketService(db_session).list_active_tickets(seed.renter, limit=5)

        assert len(tickets) == 5
        assert total == 7


class TestFormatTicketStatus:
    def test_no_tickets(self):
        assert format_ticket_status([], 0, "es") == (
            "No tienes solicitudes de mantenimiento activas en este momento."
        )
        assert format_ticket_status([], 0, "en") == "You have no active maintenance requests at this time."

    def test_spanish_summary(self, seed):
        ticket = _ticket(seed, "Salidero en cocina", "high", status="in_progress")

        text = format_ticket_status([ticket], 1, "es")

        assert text.startswith("📋 Tienes 1 solicitud(es) activa(s):")
        assert "1. Salidero en cocina" in text
        assert "Estado: En Progreso" in text
        assert "Prioridad: ⚠️ Alta" in text
        assert "Reportado: 15/03/2026" in text

    def test_english_summary_with_overflow(self, seed):
        ticket = _ticket(seed, "Leak", "emergency")

        text = format_ticket_status([ticket], 3, "en")

        assert text.startswith("📋 Showing 1 of 3 active requests (most urgent first):")
        assert "Reported: 03/15/2026" in text
        assert "You have 2 additional request(s)." in text
