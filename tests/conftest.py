"""Pytest configuration and fixtures."""

import os

# Keep the app's module-level engine off Postgres during tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from app.domain.models.classification import ClassificationResult  # noqa: E402
from app.domain.services.classification_service import Classifier  # noqa: E402
from app.domain.services.outbound_dispatcher import OutboundDispatcher  # noqa: E402
from app.infrastructure.telephony.base import (  # noqa: E402
    MessagingProviderProtocol,
    ProviderSendError,
    SendResult,
)
from app.persistence.database import Base  # noqa: E402
from app.persistence.models import *  # noqa: F401, F403, E402
from app.persistence.models.admin import AdminProfile, BuildingAdmin  # noqa: E402
from app.persistence.models.building import Building, Unit  # noqa: E402
from app.persistence.models.resident import Resident  # noqa: E402

BUILDING_WHATSAPP = "+17875550000"
BUILDING_SMS = "+17875550001"
OWNER_PHONE = "+17875551111"
RENTER_PHONE = "+17875552222"
RENTER_WHATSAPP = "+17875552299"


class FakeClassifier(Classifier):
    """Returns a fixed classification and records calls."""

    def __init__(self, result: ClassificationResult) -> None:
        self.result = result
        self.calls: list[dict] = []

    async def classify(self, message_body, resident_role, language, building_context=None):
        self.calls.append(
            {
                "message_body": message_body,
                "resident_role": resident_role,
                "language": language,
                "building_context": building_context,
            }
        )
        return self.result


class FakeProvider(MessagingProviderProtocol):
    """Records sends; fails for addresses listed in `fail_for`."""

    name = "fake"

    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.sent: list[dict] = []
        self.fail_for = fail_for or set()

    async def send_message(self, to, from_, body, channel="whatsapp"):
        if to in self.fail_for:
            raise ProviderSendError(f"cannot reach {to}", status_code=500)
        self.sent.append({"to": to, "from_": from_, "body": body, "channel": channel})
        return SendResult(
            message_id=f"SMOUT{len(self.sent):04d}",
            status="queued",
            to=to,
            from_=from_,
            provider=self.name,
        )

    def validate_webhook_signature(self, url, params, signature):
        return True


async def _no_sleep(_delay: float) -> None:
    return None


def make_classification(**overrides) -> ClassificationResult:
    data = {
        "intent": "general_question",
        "priority": "low",
        "routeTo": "admin",
        "suggestedResponse": "La piscina abre a las 8am.",
        "requiresHumanReview": False,
        "extractedData": {},
    }
    data.update(overrides)
    return ClassificationResult.model_validate(data)


@pytest.fixture
async def db_engine():
    """In-memory SQLite engine with the full schema."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def seed(db_session):
    """Building with one unit, its owner and its renter."""
    building = Building(
        name="Condominio Vista Mar",
        whatsapp_number=BUILDING_WHATSAPP,
        sms_number=BUILDING_SMS,
        preferred_language="es",
    )
    db_session.add(building)
    await db_session.flush()

    unit = Unit(building_id=building.id, unit_number="4B")
    db_session.add(unit)
    await db_session.flush()

    owner = Resident(
        building_id=building.id,
        unit_id=unit.id,
        first_name="Ana",
        last_name="Rivera",
        role="owner",
        phone=OWNER_PHONE,
        whatsapp_number=OWNER_PHONE,
        opted_in_whatsapp=True,
        preferred_language="es",
    )
    renter = Resident(
        building_id=building.id,
        unit_id=unit.id,
        first_name="Luis",
        last_name="Ortiz",
        role="renter",
        phone=RENTER_PHONE,
        whatsapp_number=RENTER_WHATSAPP,
        opted_in_whatsapp=True,
        preferred_language="es",
    )
    db_session.add_all([owner, renter])
    await db_session.flush()

    unit.owner_id = owner.id
    unit.current_renter_id = renter.id
    await db_session.commit()

    return SimpleNamespace(building=building, unit=unit, owner=owner, renter=renter)


@pytest.fixture
async def add_admin(db_session):
    """Factory adding an admin to a building."""

    async def _add(building, *, name="Admin", email=None, phone=None, preferences=None, language="es"):
        profile = AdminProfile(
            full_name=name,
            notification_email=email,
            notification_phone=phone,
            notification_preferences=preferences,
            language=language,
        )
        db_session.add(profile)
        await db_session.flush()
        db_session.add(BuildingAdmin(building_id=building.id, admin_profile_id=profile.id))
        await db_session.commit()
        return profile

    return _add


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def dispatcher(fake_provider):
    """Dispatcher around the fake provider that never really sleeps."""
    return OutboundDispatcher(fake_provider, sleep=_no_sleep)
