"""Inventory management events: properties, rooms and bed materialization."""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bedledger.core.exceptions import ConflictError, Forbidden, NotFoundError, ValidationError
from bedledger.domain.booking_state import BedStatus, active_status_values
from bedledger.models.booking import Booking
from bedledger.models.inventory import Bed, Property, Room
from bedledger.services.audit_service import audit_service
from bedledger.services.rollup_service import rollup_service

logger = logging.getLogger(__name__)


def bed_number(position: int) -> str:
    return f"B{position}"


class InventoryService:
    """Reacts to property/room management events.

    Room capacity only grows: beds are never retired through a capacity
    change, only through deleting a room that no active booking references.
    """

    async def create_property(
        self,
        db: AsyncSession,
        owner_id: UUID,
        name: str,
        security_deposit: Decimal | None = None,
        city: str | None = None,
        address_line1: str | None = None,
        description: str | None = None,
    ) -> Property:
        prop = Property(
            owner_id=owner_id,
            name=name,
            security_deposit=security_deposit,
            city=city,
            address_line1=address_line1,
            description=description,
        )
        db.add(prop)
        await db.flush()
        await audit_service.log_action(
            db, actor_id=owner_id, action="property_created",
            resource_type="property", resource_id=prop.id,
        )
        return prop

    async def get_property(self, db: AsyncSession, property_id: UUID) -> Property:
        prop = await db.get(Property, property_id)
        if prop is None:
            raise NotFoundError("Property", str(property_id))
        return prop

    async def get_room(self, db: AsyncSession, room_id: UUID) -> Room:
        """Get a room with its beds loaded."""
        result = await db.execute(
            select(Room)
            .where(Room.id == room_id)
            .options(selectinload(Room.beds))
            .execution_options(populate_existing=True)
        )
        room = result.scalar_one_or_none()
        if room is None:
            raise NotFoundError("Room", str(room_id))
        return room

    async def create_room(
        self,
        db: AsyncSession,
        property_id: UUID,
        actor_id: UUID,
        *,
        room_number: str,
        total_beds: int,
        rent_per_bed: Decimal,
        room_type: str = "shared",
        floor_number: int = 0,
        description: str | None = None,
    ) -> Room:
        """Create a room and one AVAILABLE bed per unit of capacity."""
        if total_beds < 1:
            raise ValidationError("Total beds must be at least 1")

        prop = await self.get_property(db, property_id)
        self._require_owner(prop, actor_id, "add rooms to this property")

        duplicate = await db.execute(
            select(exists().where(Room.property_id == property_id, Room.room_number == room_number))
        )
        if duplicate.scalar():
            raise ConflictError("Room number already exists in this property")

        room = Room(
            property_id=property_id,
            room_number=room_number,
            room_type=room_type,
            floor_number=floor_number,
            rent_per_bed=rent_per_bed,
            description=description,
        )
        db.add(room)
        await db.flush()

        self._add_beds(db, room.id, 1, total_beds)
        await db.flush()
        await rollup_service.recompute_for_room(db, room.id)

        await audit_service.log_action(
            db, actor_id=actor_id, action="room_created", resource_type="room",
            resource_id=room.id, new_values={"total_beds": total_beds},
        )
        logger.info(f"Room {room.room_number} created in property {property_id} with {total_beds} beds")
        return room

    async def update_room_capacity(
        self, db: AsyncSession, room_id: UUID, actor_id: UUID, total_beds: int
    ) -> Room:
        """Grow a room to ``total_beds`` by appending AVAILABLE beds."""
        room = await self._lock_room(db, room_id)
        prop = await self.get_property(db, room.property_id)
        self._require_owner(prop, actor_id, "update this room")

        current = (
            await db.execute(select(func.count(Bed.id)).where(Bed.room_id == room_id))
        ).scalar_one()
        if total_beds < current:
            raise ValidationError(
                f"Room capacity can only grow (currently {current} beds, requested {total_beds})"
            )
        if total_beds == current:
            return room

        self._add_beds(db, room.id, current + 1, total_beds)
        await db.flush()
        await rollup_service.recompute_for_room(db, room.id)

        await audit_service.log_action(
            db, actor_id=actor_id, action="room_capacity_increased", resource_type="room",
            resource_id=room.id, old_values={"total_beds": current},
            new_values={"total_beds": total_beds},
        )
        logger.info(f"Room {room_id} capacity increased {current} → {total_beds}")
        return room

    async def set_room_active(
        self, db: AsyncSession, room_id: UUID, actor_id: UUID, is_active: bool
    ) -> Room:
        room = await self._lock_room(db, room_id)
        prop = await self.get_property(db, room.property_id)
        self._require_owner(prop, actor_id, "update this room")

        room.is_active = is_active
        await db.flush()
        await rollup_service.recompute_for_room(db, room.id)
        await audit_service.log_action(
            db, actor_id=actor_id, action="room_activated" if is_active else "room_deactivated",
            resource_type="room", resource_id=room.id,
        )
        return room

    async def delete_room(self, db: AsyncSession, room_id: UUID, actor_id: UUID) -> None:
        """Delete a room and its beds unless an active booking references one of them.

        Beds are locked before the room, the same order a claim takes, so a
        concurrent claim either finishes first (and blocks the delete) or
        finds its bed gone.
        """
        await db.execute(
            select(Bed.id).where(Bed.room_id == room_id).order_by(Bed.id).with_for_update()
        )
        room = await self._lock_room(db, room_id)
        prop = await self.get_property(db, room.property_id)
        self._require_owner(prop, actor_id, "delete this room")

        in_use = await db.execute(
            select(
                exists().where(
                    Booking.bed_id.in_(select(Bed.id).where(Bed.room_id == room_id)),
                    Booking.status.in_(active_status_values()),
                )
            )
        )
        if in_use.scalar():
            raise ConflictError("Cannot delete room while a bed has an active booking")

        room_number = room.room_number
        await db.execute(delete(Bed).where(Bed.room_id == room_id))
        await db.execute(delete(Room).where(Room.id == room_id))
        await rollup_service.recompute_property(db, prop.id)

        await audit_service.log_action(
            db, actor_id=actor_id, action="room_deleted", resource_type="room",
            resource_id=room_id, old_values={"room_number": room_number},
        )
        logger.info(f"Room {room_id} deleted from property {prop.id}")

    def _add_beds(self, db: AsyncSession, room_id: UUID, first: int, last: int) -> None:
        for position in range(first, last + 1):
            db.add(
                Bed(
                    room_id=room_id,
                    bed_number=bed_number(position),
                    position=position,
                    status=BedStatus.AVAILABLE.value,
                )
            )

    async def _lock_room(self, db: AsyncSession, room_id: UUID) -> Room:
        result = await db.execute(
            select(Room)
            .where(Room.id == room_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        room = result.scalar_one_or_none()
        if room is None:
            raise NotFoundError("Room", str(room_id))
        return room

    def _require_owner(self, prop: Property, actor_id: UUID, action: str) -> None:
        if prop.owner_id != actor_id:
            raise Forbidden(f"You don't have permission to {action}")


inventory_service = InventoryService()
