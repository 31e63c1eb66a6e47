"""Bed allocation: atomically claims a bed and opens a PENDING booking."""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bedledger.config import settings
from bedledger.core.exceptions import (
    BedAlreadyClaimed,
    BedUnavailable,
    NotFoundError,
    ReferenceCollision,
    RelationshipMismatch,
    ValidationError,
)
from bedledger.domain.booking_state import BedStatus, BookingStatus, active_status_values
from bedledger.models.booking import Booking
from bedledger.models.inventory import Bed, Property, Room
from bedledger.services.audit_service import audit_service
from bedledger.services.rollup_service import rollup_service
from bedledger.utils.booking_reference import generate_unique_booking_reference

logger = logging.getLogger(__name__)


class AllocationService:
    """Claims beds for new bookings.

    Single-claim-per-bed holds under concurrency through three layers:
    the bed row is locked for the check-and-write (``SELECT ... FOR UPDATE``,
    or ``BEGIN IMMEDIATE`` on SQLite), the status flip is a compare-and-swap
    that only matches an AVAILABLE bed, and a partial unique index rejects a
    second bed-holding booking row.
    """

    async def claim_bed(
        self,
        db: AsyncSession,
        *,
        property_id: UUID,
        room_id: UUID,
        bed_id: UUID,
        requester_id: UUID,
        check_in_date: date,
        check_out_date: date | None = None,
        notes: str | None = None,
    ) -> Booking:
        """Claim a bed and create a PENDING booking in the caller's transaction.

        Raises:
            NotFoundError: property, room or bed does not exist
            RelationshipMismatch: room not in property, or bed not in room
            BedUnavailable: bed is not AVAILABLE (or its room/property is inactive)
            BedAlreadyClaimed: another booking holds the bed
        """
        if check_out_date is not None and check_out_date <= check_in_date:
            raise ValidationError("check_out_date must be after check_in_date")

        prop = await db.get(Property, property_id)
        if prop is None:
            raise NotFoundError("Property", str(property_id))

        room = await db.get(Room, room_id)
        if room is None:
            raise NotFoundError("Room", str(room_id))
        if room.property_id != prop.id:
            raise RelationshipMismatch("Room does not belong to the specified property")

        bed = await self._lock_bed(db, bed_id)
        if bed is None:
            raise NotFoundError("Bed", str(bed_id))
        if bed.room_id != room.id:
            raise RelationshipMismatch("Bed does not belong to the specified room")

        if not prop.is_active or not room.is_active:
            raise BedUnavailable("Bed is not available for booking: room or property is inactive")
        if bed.status != BedStatus.AVAILABLE.value:
            raise BedUnavailable()
        if await self.has_active_booking(db, bed.id):
            raise BedAlreadyClaimed()

        claimed = await db.execute(
            update(Bed)
            .where(Bed.id == bed.id, Bed.status == BedStatus.AVAILABLE.value)
            .values(status=BedStatus.RESERVED.value)
        )
        if claimed.rowcount != 1:
            # A concurrent claim flipped the bed between our read and write
            raise BedAlreadyClaimed()

        booking = await self._create_booking(
            db,
            prop=prop,
            room=room,
            bed=bed,
            requester_id=requester_id,
            check_in_date=check_in_date,
            check_out_date=check_out_date,
            notes=notes,
        )

        await rollup_service.recompute_for_room(db, room.id)
        await audit_service.log_booking_action(
            db,
            actor_id=requester_id,
            booking_id=booking.id,
            old_status=None,
            new_status=booking.status,
            bed_id=bed.id,
        )

        logger.info(
            f"Bed {bed.id} claimed by {requester_id}: booking {booking.booking_reference}"
        )
        return booking

    async def has_active_booking(self, db: AsyncSession, bed_id: UUID) -> bool:
        """Whether a bed-holding booking references the bed."""
        result = await db.execute(
            select(
                exists().where(
                    Booking.bed_id == bed_id,
                    Booking.status.in_(active_status_values()),
                )
            )
        )
        return bool(result.scalar())

    async def _lock_bed(self, db: AsyncSession, bed_id: UUID) -> Bed | None:
        result = await db.execute(
            select(Bed)
            .where(Bed.id == bed_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _create_booking(self, db: AsyncSession, **fields) -> Booking:
        attempts = settings.booking_reference_max_attempts
        for attempt in range(1, attempts + 1):
            try:
                return await self._insert_booking(db, **fields)
            except ReferenceCollision as exc:
                logger.warning(f"{exc} (attempt {attempt}/{attempts}), regenerating")
        logger.error(f"Could not generate a unique booking reference in {attempts} attempts")
        raise ReferenceCollision("<exhausted>")

    async def _insert_booking(
        self,
        db: AsyncSession,
        *,
        prop: Property,
        room: Room,
        bed: Bed,
        requester_id: UUID,
        check_in_date: date,
        check_out_date: date | None,
        notes: str | None,
    ) -> Booking:
        reference = await generate_unique_booking_reference(db)
        booking = Booking(
            booking_reference=reference,
            requester_id=requester_id,
            property_id=prop.id,
            room_id=room.id,
            bed_id=bed.id,
            check_in_date=check_in_date,
            check_out_date=check_out_date,
            monthly_rent=room.rent_per_bed,
            security_deposit=prop.security_deposit,
            status=BookingStatus.PENDING.value,
            notes=notes,
        )
        try:
            async with db.begin_nested():
                db.add(booking)
                await db.flush()
        except IntegrityError:
            if await self.has_active_booking(db, bed.id):
                raise BedAlreadyClaimed()
            raise ReferenceCollision(reference)
        return booking


allocation_service = AllocationService()
