"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates the bed inventory and booking ledger tables:
- Properties, rooms and beds
- Bookings (with the one-active-booking-per-bed partial unique index)
- Audit logs
"""

from typing import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ACTIVE_BOOKING_PREDICATE = "status IN ('pending', 'confirmed', 'checked_in')"


def upgrade() -> None:
    """Create all database tables."""

    # ==================== INVENTORY ====================
    op.create_table(
        "properties",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("city", sa.String(50), index=True),
        sa.Column("address_line1", sa.String(255)),
        sa.Column("security_deposit", sa.Numeric(10, 2)),
        sa.Column("total_rooms", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_beds", sa.Integer, nullable=False, server_default="0"),
        sa.Column("available_beds", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "available_beds >= 0 AND available_beds <= total_beds",
            name="ck_properties_available_beds_range",
        ),
    )

    op.create_table(
        "rooms",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "property_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("properties.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("room_number", sa.String(20), nullable=False),
        sa.Column("room_type", sa.String(20), nullable=False, server_default="shared"),
        sa.Column("floor_number", sa.Integer, server_default="0"),
        sa.Column("description", sa.Text),
        sa.Column("rent_per_bed", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_beds", sa.Integer, nullable=False, server_default="0"),
        sa.Column("available_beds", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("property_id", "room_number", name="uq_rooms_property_room_number"),
        sa.CheckConstraint(
            "available_beds >= 0 AND available_beds <= total_beds",
            name="ck_rooms_available_beds_range",
        ),
    )

    op.create_table(
        "beds",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "room_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("rooms.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("bed_number", sa.String(10), nullable=False),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="available", index=True),
        sa.Column("current_occupant_id", postgresql.UUID(as_uuid=True)),
        sa.Column("occupied_from", sa.Date),
        sa.Column("expected_checkout", sa.Date),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("room_id", "bed_number", name="uq_beds_room_bed_number"),
        sa.UniqueConstraint("room_id", "position", name="uq_beds_room_position"),
        sa.CheckConstraint(
            "status IN ('available', 'reserved', 'occupied')", name="ck_beds_status"
        ),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("booking_reference", sa.String(32), unique=True, nullable=False, index=True),
        sa.Column("requester_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column(
            "property_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("properties.id"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "room_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("rooms.id", ondelete="SET NULL"),
            index=True,
        ),
        sa.Column(
            "bed_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("beds.id", ondelete="SET NULL"),
            index=True,
        ),
        sa.Column("check_in_date", sa.Date, nullable=False),
        sa.Column("check_out_date", sa.Date),
        sa.Column("monthly_rent", sa.Numeric(10, 2), nullable=False),
        sa.Column("security_deposit", sa.Numeric(10, 2)),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("cancelled_by", sa.String(10)),
        sa.Column("notes", sa.Text),
        sa.Column("confirmed_at", sa.DateTime(timezone=True)),
        sa.Column("checked_in_at", sa.DateTime(timezone=True)),
        sa.Column("checked_out_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'checked_in', 'checked_out', 'cancelled')",
            name="ck_bookings_status",
        ),
    )
    op.create_index(
        "uq_bookings_bed_active",
        "bookings",
        ["bed_id"],
        unique=True,
        postgresql_where=sa.text(ACTIVE_BOOKING_PREDICATE),
    )

    # ==================== AUDIT ====================
    op.create_table(
        "audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("actor_id", postgresql.UUID(as_uuid=True), index=True),
        sa.Column("action", sa.String(100), nullable=False, index=True),
        sa.Column("resource_type", sa.String(50), nullable=False, index=True),
        sa.Column("resource_id", postgresql.UUID(as_uuid=True), index=True),
        sa.Column("old_values", postgresql.JSONB),
        sa.Column("new_values", postgresql.JSONB),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("audit_logs")
    op.drop_index("uq_bookings_bed_active", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("beds")
    op.drop_table("rooms")
    op.drop_table("properties")
