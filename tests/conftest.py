"""Shared fixtures: a file-backed SQLite database per test and an HTTP client."""

import os

os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///./bedledger-test.db")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

import httpx
import pytest

import bedledger.models  # noqa: F401
from bedledger.core.security import create_access_token
from bedledger.database import Base, build_engine, build_session_factory, get_db
from bedledger.domain.booking_state import BookingStatus
from bedledger.main import create_application
from bedledger.models.booking import Booking
from bedledger.services.allocation_service import allocation_service
from bedledger.services.inventory_service import inventory_service
from bedledger.services.lifecycle_service import lifecycle_service

RENT = Decimal("250.00")
DEPOSIT = Decimal("500.00")

# Transitions that lead from PENDING to each status
PATH_TO_STATUS = {
    BookingStatus.PENDING: [],
    BookingStatus.CONFIRMED: [BookingStatus.CONFIRMED],
    BookingStatus.CHECKED_IN: [BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN],
    BookingStatus.CHECKED_OUT: [
        BookingStatus.CONFIRMED,
        BookingStatus.CHECKED_IN,
        BookingStatus.CHECKED_OUT,
    ],
    BookingStatus.CANCELLED: [BookingStatus.CANCELLED],
}


@dataclass
class Inventory:
    owner_id: uuid.UUID
    property_id: uuid.UUID
    room_id: uuid.UUID
    bed_ids: list[uuid.UUID] = field(default_factory=list)


def future(days: int = 7) -> date:
    return date.today() + timedelta(days=days)


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'bedledger.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def uow(session_factory):
    """Unit of work: commit on success, roll back and re-raise on error."""

    @asynccontextmanager
    async def _uow():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return _uow


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def tenant_id():
    return uuid.uuid4()


@pytest.fixture
def make_inventory(uow):
    """Create a property with one room of ``beds`` beds."""

    async def _make(owner_id: uuid.UUID, beds: int = 3, room_number: str = "101") -> Inventory:
        async with uow() as db:
            prop = await inventory_service.create_property(
                db, owner_id=owner_id, name="Maple House", security_deposit=DEPOSIT
            )
            room = await inventory_service.create_room(
                db, prop.id, owner_id,
                room_number=room_number, total_beds=beds, rent_per_bed=RENT,
            )
            room = await inventory_service.get_room(db, room.id)
            return Inventory(
                owner_id=owner_id,
                property_id=prop.id,
                room_id=room.id,
                bed_ids=[bed.id for bed in room.beds],
            )

    return _make


@pytest.fixture
async def inventory(make_inventory, owner_id) -> Inventory:
    return await make_inventory(owner_id, beds=3)


@pytest.fixture
def claim(uow):
    """Claim a bed of ``inv`` in its own unit of work."""

    async def _claim(inv: Inventory, requester_id: uuid.UUID, bed_index: int = 0, **kwargs):
        kwargs.setdefault("check_in_date", future())
        async with uow() as db:
            return await allocation_service.claim_bed(
                db,
                property_id=inv.property_id,
                room_id=inv.room_id,
                bed_id=inv.bed_ids[bed_index],
                requester_id=requester_id,
                **kwargs,
            )

    return _claim


@pytest.fixture
def transition(uow):
    async def _transition(booking_id, actor_id, target):
        async with uow() as db:
            return await lifecycle_service.transition_booking(db, booking_id, actor_id, target)

    return _transition


@pytest.fixture
def drive_to(transition):
    """Move a PENDING booking to ``status`` through the allowed path."""

    async def _drive(booking_id, owner_id, status: BookingStatus):
        for step in PATH_TO_STATUS[status]:
            await transition(booking_id, owner_id, step)

    return _drive


def auth_headers(user_id: uuid.UUID, role: str = "tenant") -> dict[str, str]:
    token = create_access_token({"sub": str(user_id), "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(session_factory):
    app = create_application()

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@dataclass
class InventoryState:
    bed_statuses: list[str]
    room_total: int
    room_available: int
    property_rooms: int
    property_total: int
    property_available: int


@pytest.fixture
def read_state(session_factory):
    """Read committed bed statuses and counters in a fresh session."""

    async def _read(inv: Inventory) -> InventoryState:
        async with session_factory() as db:
            room = await inventory_service.get_room(db, inv.room_id)
            prop = await inventory_service.get_property(db, inv.property_id)
            return InventoryState(
                bed_statuses=[bed.status for bed in room.beds],
                room_total=room.total_beds,
                room_available=room.available_beds,
                property_rooms=prop.total_rooms,
                property_total=prop.total_beds,
                property_available=prop.available_beds,
            )

    return _read


@pytest.fixture
def load_booking(session_factory):
    async def _load(booking_id) -> Booking:
        async with session_factory() as db:
            return await db.get(Booking, booking_id)

    return _load
