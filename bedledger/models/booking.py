"""Booking ledger model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bedledger.database import Base
from bedledger.models.inventory import utcnow

if TYPE_CHECKING:
    from bedledger.models.inventory import Bed, Property, Room

# At most one bed-holding booking per bed, enforced by the database
ACTIVE_BOOKING_PREDICATE = "status IN ('pending', 'confirmed', 'checked_in')"


class Booking(Base):
    """A tenant's claim on one bed.

    Property, room and bed are weak references: the booking never owns them and
    terminal bookings are kept for history.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        Index(
            "uq_bookings_bed_active",
            "bed_id",
            unique=True,
            postgresql_where=text(ACTIVE_BOOKING_PREDICATE),
            sqlite_where=text(ACTIVE_BOOKING_PREDICATE),
        ),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'checked_in', 'checked_out', 'cancelled')",
            name="ck_bookings_status",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_reference: Mapped[str] = mapped_column(
        String(32), unique=True, nullable=False, index=True
    )  # BK20260101120000ABC123
    requester_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("properties.id"), nullable=False, index=True
    )
    room_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("rooms.id", ondelete="SET NULL"), index=True
    )
    bed_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("beds.id", ondelete="SET NULL"), index=True
    )

    # Dates
    check_in_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_out_date: Mapped[date | None] = mapped_column(Date)

    # Terms snapshotted at claim time
    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    security_deposit: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    # Status
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True
    )  # pending, confirmed, checked_in, checked_out, cancelled
    cancelled_by: Mapped[str | None] = mapped_column(String(10))  # tenant, owner

    notes: Mapped[str | None] = mapped_column(Text)

    # Timestamps
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    checked_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    checked_out_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships (lookup only)
    property: Mapped["Property"] = relationship("Property", viewonly=True)
    room: Mapped["Room | None"] = relationship("Room", viewonly=True)
    bed: Mapped["Bed | None"] = relationship("Bed", viewonly=True)
