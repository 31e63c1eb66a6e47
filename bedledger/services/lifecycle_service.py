"""Booking lifecycle: validated status transitions with bed and rollup sync."""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bedledger.core.exceptions import Forbidden, NotFoundError
from bedledger.domain.booking_state import (
    BED_STATUS_FOR_BOOKING,
    BedStatus,
    BookingStatus,
    assert_booking_transition,
    assert_cancellable,
    status_value,
)
from bedledger.models.booking import Booking
from bedledger.models.inventory import Bed, Property
from bedledger.services.audit_service import audit_service
from bedledger.services.rollup_service import rollup_service

logger = logging.getLogger(__name__)

_TIMESTAMP_FIELD = {
    BookingStatus.CONFIRMED: "confirmed_at",
    BookingStatus.CHECKED_IN: "checked_in_at",
    BookingStatus.CHECKED_OUT: "checked_out_at",
    BookingStatus.CANCELLED: "cancelled_at",
}


class LifecycleService:
    """Drives bookings through the state machine."""

    async def transition_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        actor_id: UUID,
        target_status: BookingStatus | str,
    ) -> Booking:
        """Move a booking to ``target_status``.

        Authorization is checked before the transition table: the requester
        or the property owner may cancel, only the property owner may request
        anything else.

        Raises:
            NotFoundError: booking does not exist
            Forbidden: actor may not request this transition
            InvalidTransition: the state machine does not allow it
        """
        target = BookingStatus(status_value(target_status))
        booking, prop = await self._load_for_update(db, booking_id)
        self._authorize(booking, prop, actor_id, target)
        assert_booking_transition(booking.status, target)
        return await self._apply(db, booking, prop, actor_id, target)

    async def cancel_booking(self, db: AsyncSession, booking_id: UUID, actor_id: UUID) -> None:
        """Cancel a PENDING or CONFIRMED booking.

        Checked-in bookings must be checked out instead.
        """
        booking, prop = await self._load_for_update(db, booking_id)
        self._authorize(booking, prop, actor_id, BookingStatus.CANCELLED)
        assert_cancellable(booking.status)
        assert_booking_transition(booking.status, BookingStatus.CANCELLED)
        await self._apply(db, booking, prop, actor_id, BookingStatus.CANCELLED)

    def _authorize(
        self, booking: Booking, prop: Property, actor_id: UUID, target: BookingStatus
    ) -> None:
        is_owner = prop.owner_id == actor_id
        if target == BookingStatus.CANCELLED:
            if not (is_owner or booking.requester_id == actor_id):
                raise Forbidden("You don't have permission to cancel this booking")
        elif not is_owner:
            raise Forbidden("Only the property owner can update this booking")

    async def _load_for_update(
        self, db: AsyncSession, booking_id: UUID
    ) -> tuple[Booking, Property]:
        booking = await db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking", str(booking_id))

        # Bed first, then booking: the same lock order as a claim
        if booking.bed_id is not None:
            await db.execute(
                select(Bed.id).where(Bed.id == booking.bed_id).with_for_update()
            )
        booking = (
            await db.execute(
                select(Booking)
                .where(Booking.id == booking_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
        ).scalar_one()

        prop = await db.get(Property, booking.property_id)
        if prop is None:
            raise NotFoundError("Property", str(booking.property_id))
        return booking, prop

    async def _apply(
        self,
        db: AsyncSession,
        booking: Booking,
        prop: Property,
        actor_id: UUID,
        target: BookingStatus,
    ) -> Booking:
        old_status = booking.status
        bed = await db.get(Bed, booking.bed_id) if booking.bed_id is not None else None

        if bed is not None:
            self._sync_bed(bed, booking, target)

        now = datetime.now(UTC)
        booking.status = target.value
        setattr(booking, _TIMESTAMP_FIELD[target], now)
        if target == BookingStatus.CANCELLED:
            booking.cancelled_by = "owner" if prop.owner_id == actor_id else "tenant"
        await db.flush()

        if bed is not None:
            await rollup_service.recompute_for_room(db, bed.room_id)
        else:
            await rollup_service.recompute_property(db, prop.id)

        await audit_service.log_booking_action(
            db,
            actor_id=actor_id,
            booking_id=booking.id,
            old_status=old_status,
            new_status=booking.status,
            bed_id=booking.bed_id,
        )
        logger.info(
            f"Booking {booking.booking_reference}: {old_status} → {booking.status} by {actor_id}"
        )
        return booking

    def _sync_bed(self, bed: Bed, booking: Booking, target: BookingStatus) -> None:
        bed_status = BED_STATUS_FOR_BOOKING[target]
        bed.status = bed_status.value

        if bed_status == BedStatus.OCCUPIED:
            bed.current_occupant_id = booking.requester_id
            bed.occupied_from = booking.check_in_date
            bed.expected_checkout = booking.check_out_date
        elif bed_status == BedStatus.AVAILABLE:
            bed.current_occupant_id = None
            bed.occupied_from = None
            bed.expected_checkout = None


lifecycle_service = LifecycleService()
