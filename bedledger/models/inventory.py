"""Inventory models: properties, rooms and beds."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bedledger.database import Base


def utcnow() -> datetime:
    return datetime.now(UTC)


class Property(Base):
    """Shared-housing property owned by a property-owning account."""

    __tablename__ = "properties"
    __table_args__ = (
        CheckConstraint(
            "available_beds >= 0 AND available_beds <= total_beds",
            name="ck_properties_available_beds_range",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Basic Info
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    city: Mapped[str | None] = mapped_column(String(50), index=True)
    address_line1: Mapped[str | None] = mapped_column(String(255))

    # Terms
    security_deposit: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    # Rollups (derived from bed state, written only by the rollup service)
    total_rooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_beds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    available_beds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    rooms: Mapped[list["Room"]] = relationship(
        "Room", back_populates="property", passive_deletes=True
    )


class Room(Base):
    """Room within a property; owns its beds."""

    __tablename__ = "rooms"
    __table_args__ = (
        UniqueConstraint("property_id", "room_number", name="uq_rooms_property_room_number"),
        CheckConstraint(
            "available_beds >= 0 AND available_beds <= total_beds",
            name="ck_rooms_available_beds_range",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )

    room_number: Mapped[str] = mapped_column(String(20), nullable=False)
    room_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="shared"
    )  # single, double, triple, shared, dormitory
    floor_number: Mapped[int] = mapped_column(Integer, default=0)
    description: Mapped[str | None] = mapped_column(Text)

    # Pricing
    rent_per_bed: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Rollups (derived from bed state, written only by the rollup service)
    total_beds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    available_beds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    property: Mapped["Property"] = relationship("Property", back_populates="rooms")
    beds: Mapped[list["Bed"]] = relationship(
        "Bed", back_populates="room", passive_deletes=True, order_by="Bed.position"
    )


class Bed(Base):
    """Smallest allocatable unit. ``status`` is the source of truth for availability."""

    __tablename__ = "beds"
    __table_args__ = (
        UniqueConstraint("room_id", "bed_number", name="uq_beds_room_bed_number"),
        UniqueConstraint("room_id", "position", name="uq_beds_room_position"),
        CheckConstraint(
            "status IN ('available', 'reserved', 'occupied')", name="ck_beds_status"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    room_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True
    )
    bed_number: Mapped[str] = mapped_column(String(10), nullable=False)  # B1, B2, ...
    position: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-based, display order

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="available", index=True
    )  # available, reserved, occupied

    # Occupancy (lookup-only reference to the identity service's account id)
    current_occupant_id: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    occupied_from: Mapped[date | None] = mapped_column(Date)
    expected_checkout: Mapped[date | None] = mapped_column(Date)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    room: Mapped["Room"] = relationship("Room", back_populates="beds")
