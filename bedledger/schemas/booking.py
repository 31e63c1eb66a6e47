"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bedledger.domain.booking_state import BookingStatus


class BookingCreate(BaseModel):
    """Schema for claiming a bed."""

    property_id: UUID
    room_id: UUID
    bed_id: UUID
    check_in_date: date
    check_out_date: date | None = None
    notes: str | None = Field(None, max_length=1000)

    @field_validator("check_in_date")
    @classmethod
    def validate_check_in(cls, v: date) -> date:
        if v < date.today():
            raise ValueError("check_in_date cannot be in the past")
        return v

    @field_validator("check_out_date")
    @classmethod
    def validate_checkout(cls, v: date | None, info) -> date | None:
        check_in = info.data.get("check_in_date")
        if v is not None and check_in and v <= check_in:
            raise ValueError("check_out_date must be after check_in_date")
        return v


class BookingTransitionRequest(BaseModel):
    """Schema for moving a booking to a new status."""

    status: BookingStatus


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_reference: str
    requester_id: UUID

    # Inventory references
    property_id: UUID
    room_id: UUID | None
    bed_id: UUID | None

    # Dates
    check_in_date: date
    check_out_date: date | None

    # Terms
    monthly_rent: Decimal
    security_deposit: Decimal | None

    # Status
    status: str
    cancelled_by: str | None
    notes: str | None

    # Timestamps
    confirmed_at: datetime | None
    checked_in_at: datetime | None
    checked_out_at: datetime | None
    cancelled_at: datetime | None
    created_at: datetime
    updated_at: datetime


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""

    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int
