"""Property and room management events."""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import event, select

from bedledger.core.exceptions import ConflictError, Forbidden, NotFoundError, ValidationError
from bedledger.domain.booking_state import BookingStatus
from bedledger.models.audit import AuditLog
from bedledger.models.inventory import Bed, Room
from bedledger.services.inventory_service import bed_number, inventory_service


def test_bed_numbers():
    assert [bed_number(i) for i in (1, 2, 12)] == ["B1", "B2", "B12"]


async def test_create_room_materializes_available_beds(owner_id, uow, read_state, make_inventory):
    inv = await make_inventory(owner_id, beds=4)

    async with uow() as db:
        room = await inventory_service.get_room(db, inv.room_id)
        assert [b.bed_number for b in room.beds] == ["B1", "B2", "B3", "B4"]
        assert room.rent_per_bed == Decimal("250.00")

    state = await read_state(inv)
    assert state.bed_statuses == ["available"] * 4
    assert (state.room_total, state.room_available) == (4, 4)
    assert (state.property_rooms, state.property_total, state.property_available) == (1, 4, 4)


async def test_create_room_requires_property_owner(inventory, uow):
    with pytest.raises(Forbidden):
        async with uow() as db:
            await inventory_service.create_room(
                db, inventory.property_id, uuid.uuid4(),
                room_number="999", total_beds=1, rent_per_bed=Decimal("100.00"),
            )


async def test_duplicate_room_number_conflicts(inventory, uow):
    with pytest.raises(ConflictError):
        async with uow() as db:
            await inventory_service.create_room(
                db, inventory.property_id, inventory.owner_id,
                room_number="101", total_beds=2, rent_per_bed=Decimal("100.00"),
            )


async def test_create_room_needs_a_bed(inventory, uow):
    with pytest.raises(ValidationError):
        async with uow() as db:
            await inventory_service.create_room(
                db, inventory.property_id, inventory.owner_id,
                room_number="102", total_beds=0, rent_per_bed=Decimal("100.00"),
            )


async def test_create_room_in_unknown_property(owner_id, uow):
    with pytest.raises(NotFoundError):
        async with uow() as db:
            await inventory_service.create_room(
                db, uuid.uuid4(), owner_id,
                room_number="1", total_beds=1, rent_per_bed=Decimal("100.00"),
            )


async def test_capacity_growth_appends_beds(inventory, claim, tenant_id, uow, read_state):
    await claim(inventory, tenant_id)

    async with uow() as db:
        await inventory_service.update_room_capacity(db, inventory.room_id, inventory.owner_id, 5)

    async with uow() as db:
        room = await inventory_service.get_room(db, inventory.room_id)
        assert [b.bed_number for b in room.beds] == ["B1", "B2", "B3", "B4", "B5"]
        # Existing beds keep their identity and state
        assert room.beds[0].id == inventory.bed_ids[0]
        assert room.beds[0].status == "reserved"

    state = await read_state(inventory)
    assert (state.room_total, state.room_available) == (5, 4)
    assert (state.property_total, state.property_available) == (5, 4)


async def test_capacity_never_shrinks(inventory, uow, read_state):
    with pytest.raises(ValidationError):
        async with uow() as db:
            await inventory_service.update_room_capacity(
                db, inventory.room_id, inventory.owner_id, 2
            )

    assert (await read_state(inventory)).room_total == 3


async def test_same_capacity_is_a_no_op(inventory, uow, session_factory):
    async with uow() as db:
        await inventory_service.update_room_capacity(db, inventory.room_id, inventory.owner_id, 3)

    async with session_factory() as db:
        count = len((await db.execute(select(Bed).where(Bed.room_id == inventory.room_id))).all())
    assert count == 3


async def test_capacity_change_requires_owner(inventory, uow):
    with pytest.raises(Forbidden):
        async with uow() as db:
            await inventory_service.update_room_capacity(db, inventory.room_id, uuid.uuid4(), 4)


async def test_deactivated_room_keeps_counters(inventory, uow, read_state):
    async with uow() as db:
        room = await inventory_service.set_room_active(
            db, inventory.room_id, inventory.owner_id, False
        )
        assert room.is_active is False

    state = await read_state(inventory)
    assert (state.room_available, state.property_available) == (3, 3)


async def test_delete_room_blocked_by_active_booking(inventory, claim, tenant_id, uow, read_state):
    await claim(inventory, tenant_id)

    with pytest.raises(ConflictError):
        async with uow() as db:
            await inventory_service.delete_room(db, inventory.room_id, inventory.owner_id)

    assert (await read_state(inventory)).room_total == 3


async def test_delete_room_keeps_booking_history(
    inventory, claim, tenant_id, transition, uow, session_factory, load_booking
):
    booking = await claim(inventory, tenant_id)
    await transition(booking.id, tenant_id, BookingStatus.CANCELLED)

    async with uow() as db:
        await inventory_service.delete_room(db, inventory.room_id, inventory.owner_id)

    async with session_factory() as db:
        assert await db.get(Room, inventory.room_id) is None
        assert (await db.execute(select(Bed))).first() is None
        prop = await inventory_service.get_property(db, inventory.property_id)
        assert (prop.total_rooms, prop.total_beds, prop.available_beds) == (0, 0, 0)
        actions = (
            await db.execute(
                select(AuditLog.action).where(AuditLog.resource_id == inventory.room_id)
            )
        ).scalars().all()
        assert "room_deleted" in actions

    stored = await load_booking(booking.id)
    assert stored.status == "cancelled"
    assert stored.booking_reference == booking.booking_reference
    assert stored.bed_id is None
    assert stored.room_id is None


async def test_get_unknown_room(uow):
    with pytest.raises(NotFoundError):
        async with uow() as db:
            await inventory_service.get_room(db, uuid.uuid4())


async def test_beds_list_in_numeric_order(make_inventory, owner_id, uow):
    inv = await make_inventory(owner_id, beds=11)

    async with uow() as db:
        await inventory_service.update_room_capacity(db, inv.room_id, owner_id, 12)

    async with uow() as db:
        room = await inventory_service.get_room(db, inv.room_id)
        assert [b.bed_number for b in room.beds] == [f"B{n}" for n in range(1, 13)]
        assert [b.position for b in room.beds] == list(range(1, 13))


async def test_delete_room_locks_beds_before_room(inventory, uow, engine):
    statements = []

    def record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine.sync_engine, "before_cursor_execute", record)
    try:
        async with uow() as db:
            await inventory_service.delete_room(db, inventory.room_id, inventory.owner_id)
    finally:
        event.remove(engine.sync_engine, "before_cursor_execute", record)

    first_bed_read = next(i for i, s in enumerate(statements) if "FROM beds" in s)
    first_room_read = next(i for i, s in enumerate(statements) if "FROM rooms" in s)
    assert first_bed_read < first_room_read
