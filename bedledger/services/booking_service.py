"""Read-side booking queries."""

from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bedledger.core.exceptions import Forbidden, NotFoundError
from bedledger.domain.booking_state import BookingStatus, status_value
from bedledger.models.booking import Booking
from bedledger.models.inventory import Property


class BookingService:
    """Booking lookups and paginated listings."""

    async def get_booking(self, db: AsyncSession, booking_id: UUID, actor_id: UUID) -> Booking:
        """Get a booking visible to its requester or the property owner."""
        booking = await db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking", str(booking_id))

        if booking.requester_id != actor_id:
            owner_id = (
                await db.execute(select(Property.owner_id).where(Property.id == booking.property_id))
            ).scalar_one_or_none()
            if owner_id != actor_id:
                raise Forbidden("You don't have permission to view this booking")
        return booking

    async def get_booking_by_reference(self, db: AsyncSession, reference: str) -> Booking:
        result = await db.execute(select(Booking).where(Booking.booking_reference == reference))
        booking = result.scalar_one_or_none()
        if booking is None:
            raise NotFoundError("Booking", reference)
        return booking

    async def list_for_requester(
        self, db: AsyncSession, requester_id: UUID, page: int = 1, page_size: int = 20
    ) -> tuple[list[Booking], int]:
        query = select(Booking).where(Booking.requester_id == requester_id)
        return await self._paginate(db, query, page, page_size)

    async def list_for_owner(
        self,
        db: AsyncSession,
        owner_id: UUID,
        status: BookingStatus | str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Booking], int]:
        """Bookings across every property owned by ``owner_id``."""
        query = (
            select(Booking)
            .join(Property, Property.id == Booking.property_id)
            .where(Property.owner_id == owner_id)
        )
        if status is not None:
            query = query.where(Booking.status == status_value(status))
        return await self._paginate(db, query, page, page_size)

    async def _paginate(
        self, db: AsyncSession, query: Select, page: int, page_size: int
    ) -> tuple[list[Booking], int]:
        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        offset = (page - 1) * page_size
        query = (
            query.order_by(Booking.created_at.desc(), Booking.id)
            .offset(offset)
            .limit(page_size)
        )
        result = await db.execute(query)
        return list(result.scalars().all()), total


booking_service = BookingService()
