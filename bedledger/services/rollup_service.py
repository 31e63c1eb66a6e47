"""Rollup recalculation for room and property bed counters.

Counters are caches of bed state. They are always recomputed from the beds
table, never incremented, so running a recompute twice yields the same values
and a recompute after a failed unit of work repairs any drift.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bedledger.core.exceptions import NotFoundError
from bedledger.domain.booking_state import BedStatus
from bedledger.models.inventory import Bed, Property, Room

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of a full reconciliation pass."""

    rooms_checked: int = 0
    rooms_corrected: int = 0
    properties_checked: int = 0
    properties_corrected: int = 0


class RollupService:
    """Derives room and property counters from bed state."""

    async def recompute_room(self, db: AsyncSession, room_id: UUID) -> Room:
        """Set the room's total and available bed counts from its beds."""
        room, _ = await self._recompute_room(db, room_id)
        return room

    async def recompute_property(self, db: AsyncSession, property_id: UUID) -> Property:
        """Set the property's room and bed counts from its rooms."""
        prop, _ = await self._recompute_property(db, property_id)
        return prop

    async def recompute_for_room(self, db: AsyncSession, room_id: UUID) -> tuple[Room, Property]:
        """Recompute a room and then its property."""
        room = await self.recompute_room(db, room_id)
        prop = await self.recompute_property(db, room.property_id)
        return room, prop

    async def reconcile_all(self, db: AsyncSession) -> ReconcileResult:
        """Recompute every room, then every property."""
        result = ReconcileResult()

        room_ids = (await db.execute(select(Room.id).order_by(Room.id))).scalars().all()
        for room_id in room_ids:
            _, drifted = await self._recompute_room(db, room_id)
            result.rooms_checked += 1
            result.rooms_corrected += int(drifted)

        property_ids = (
            await db.execute(select(Property.id).order_by(Property.id))
        ).scalars().all()
        for property_id in property_ids:
            _, drifted = await self._recompute_property(db, property_id)
            result.properties_checked += 1
            result.properties_corrected += int(drifted)

        if result.rooms_corrected or result.properties_corrected:
            logger.warning(
                f"Rollup drift corrected: rooms={result.rooms_corrected}, "
                f"properties={result.properties_corrected}"
            )
        return result

    async def _recompute_room(self, db: AsyncSession, room_id: UUID) -> tuple[Room, bool]:
        # Lock the room row so concurrent claims on sibling beds serialize here
        room = (
            await db.execute(
                select(Room)
                .where(Room.id == room_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
        ).scalar_one_or_none()
        if room is None:
            raise NotFoundError("Room", str(room_id))

        total, available = (
            await db.execute(
                select(
                    func.count(Bed.id),
                    func.coalesce(
                        func.sum(case((Bed.status == BedStatus.AVAILABLE.value, 1), else_=0)), 0
                    ),
                ).where(Bed.room_id == room_id)
            )
        ).one()

        drifted = (room.total_beds, room.available_beds) != (total, available)
        room.total_beds = total
        room.available_beds = available
        await db.flush()
        return room, drifted

    async def _recompute_property(
        self, db: AsyncSession, property_id: UUID
    ) -> tuple[Property, bool]:
        prop = (
            await db.execute(
                select(Property)
                .where(Property.id == property_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
        ).scalar_one_or_none()
        if prop is None:
            raise NotFoundError("Property", str(property_id))

        total_rooms, total_beds, available_beds = (
            await db.execute(
                select(
                    func.count(Room.id),
                    func.coalesce(func.sum(Room.total_beds), 0),
                    func.coalesce(func.sum(Room.available_beds), 0),
                ).where(Room.property_id == property_id)
            )
        ).one()

        drifted = (prop.total_rooms, prop.total_beds, prop.available_beds) != (
            total_rooms,
            total_beds,
            available_beds,
        )
        prop.total_rooms = total_rooms
        prop.total_beds = total_beds
        prop.available_beds = available_beds
        await db.flush()
        return prop, drifted


rollup_service = RollupService()
