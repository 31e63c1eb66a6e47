"""Inventory health check service (read-only validation)."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bedledger.domain.booking_state import BedStatus, BookingStatus, active_status_values
from bedledger.models.booking import Booking
from bedledger.models.inventory import Bed, Property, Room


class HealthStatus(str, Enum):
    OK = "OK"
    WARNING = "WARNING"
    ERROR = "ERROR"


class InventoryHealthService:
    """Read-only validator for bed, booking and rollup consistency."""

    async def run_all_checks(self, db: AsyncSession) -> dict[str, Any]:
        """Run all inventory health checks."""
        checks = []
        overall_status = HealthStatus.OK

        check_methods = [
            self._check_single_active_booking_per_bed,
            self._check_bed_status_matches_bookings,
            self._check_room_rollups,
            self._check_property_rollups,
        ]

        for check_method in check_methods:
            result = await check_method(db)
            checks.append(result)

            if result["status"] == HealthStatus.ERROR:
                overall_status = HealthStatus.ERROR
            elif result["status"] == HealthStatus.WARNING and overall_status != HealthStatus.ERROR:
                overall_status = HealthStatus.WARNING

        counts = await self._get_counts(db)

        return {
            "status": overall_status,
            "checks": checks,
            "counts": counts,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    async def _check_single_active_booking_per_bed(self, db: AsyncSession) -> dict:
        """No bed may be held by more than one active booking."""
        result = await db.execute(
            select(Booking.bed_id, func.count().label("cnt"))
            .where(Booking.bed_id.isnot(None), Booking.status.in_(active_status_values()))
            .group_by(Booking.bed_id)
            .having(func.count() > 1)
        )
        duplicates = result.all()

        if duplicates:
            return {
                "name": "single_active_booking_per_bed",
                "status": HealthStatus.ERROR,
                "message": f"{len(duplicates)} bed(s) held by more than one active booking",
                "details": {"bed_ids": [str(d[0]) for d in duplicates]},
            }

        return {
            "name": "single_active_booking_per_bed",
            "status": HealthStatus.OK,
            "message": "Every bed has at most one active booking",
            "details": {},
        }

    async def _check_bed_status_matches_bookings(self, db: AsyncSession) -> dict:
        """Bed status must agree with the booking holding it."""
        expected = case(
            (Booking.status == BookingStatus.CHECKED_IN.value, BedStatus.OCCUPIED.value),
            else_=BedStatus.RESERVED.value,
        )
        active = (
            select(Booking.bed_id, expected.label("expected_status"))
            .where(Booking.bed_id.isnot(None), Booking.status.in_(active_status_values()))
            .subquery()
        )

        mismatched = (
            await db.execute(
                select(Bed.id).join(active, active.c.bed_id == Bed.id).where(
                    Bed.status != active.c.expected_status
                )
            )
        ).scalars().all()

        orphaned = (
            await db.execute(
                select(Bed.id)
                .outerjoin(active, active.c.bed_id == Bed.id)
                .where(Bed.status != BedStatus.AVAILABLE.value, active.c.bed_id.is_(None))
            )
        ).scalars().all()

        if mismatched or orphaned:
            return {
                "name": "bed_status_matches_bookings",
                "status": HealthStatus.ERROR,
                "message": (
                    f"{len(mismatched)} bed(s) disagree with their booking, "
                    f"{len(orphaned)} held bed(s) have no active booking"
                ),
                "details": {
                    "mismatched_bed_ids": [str(b) for b in mismatched],
                    "orphaned_bed_ids": [str(b) for b in orphaned],
                },
            }

        return {
            "name": "bed_status_matches_bookings",
            "status": HealthStatus.OK,
            "message": "Bed status agrees with active bookings",
            "details": {},
        }

    async def _check_room_rollups(self, db: AsyncSession) -> dict:
        """Room counters must equal live bed counts."""
        live = (
            select(
                Bed.room_id.label("room_id"),
                func.count(Bed.id).label("total"),
                func.sum(case((Bed.status == BedStatus.AVAILABLE.value, 1), else_=0)).label(
                    "available"
                ),
            )
            .group_by(Bed.room_id)
            .subquery()
        )
        result = await db.execute(
            select(Room.id)
            .outerjoin(live, live.c.room_id == Room.id)
            .where(
                (Room.total_beds != func.coalesce(live.c.total, 0))
                | (Room.available_beds != func.coalesce(live.c.available, 0))
            )
        )
        drifted = result.scalars().all()

        if drifted:
            return {
                "name": "room_rollups",
                "status": HealthStatus.WARNING,
                "message": f"{len(drifted)} room(s) have stale bed counters",
                "details": {"room_ids": [str(r) for r in drifted]},
            }

        return {
            "name": "room_rollups",
            "status": HealthStatus.OK,
            "message": "Room counters match bed state",
            "details": {},
        }

    async def _check_property_rollups(self, db: AsyncSession) -> dict:
        """Property counters must equal the sums over their rooms."""
        live = (
            select(
                Room.property_id.label("property_id"),
                func.count(Room.id).label("rooms"),
                func.sum(Room.total_beds).label("total"),
                func.sum(Room.available_beds).label("available"),
            )
            .group_by(Room.property_id)
            .subquery()
        )
        result = await db.execute(
            select(Property.id)
            .outerjoin(live, live.c.property_id == Property.id)
            .where(
                (Property.total_rooms != func.coalesce(live.c.rooms, 0))
                | (Property.total_beds != func.coalesce(live.c.total, 0))
                | (Property.available_beds != func.coalesce(live.c.available, 0))
            )
        )
        drifted = result.scalars().all()

        if drifted:
            return {
                "name": "property_rollups",
                "status": HealthStatus.WARNING,
                "message": f"{len(drifted)} property(ies) have stale bed counters",
                "details": {"property_ids": [str(p) for p in drifted]},
            }

        return {
            "name": "property_rollups",
            "status": HealthStatus.OK,
            "message": "Property counters match room state",
            "details": {},
        }

    async def _get_counts(self, db: AsyncSession) -> dict[str, int]:
        bed_counts = dict(
            (await db.execute(select(Bed.status, func.count()).group_by(Bed.status))).all()
        )
        booking_counts = dict(
            (await db.execute(select(Booking.status, func.count()).group_by(Booking.status))).all()
        )
        return {
            "properties": (await db.execute(select(func.count(Property.id)))).scalar() or 0,
            "rooms": (await db.execute(select(func.count(Room.id)))).scalar() or 0,
            **{f"beds_{status.value}": bed_counts.get(status.value, 0) for status in BedStatus},
            **{
                f"bookings_{status.value}": booking_counts.get(status.value, 0)
                for status in BookingStatus
            },
        }


inventory_health_service = InventoryHealthService()
