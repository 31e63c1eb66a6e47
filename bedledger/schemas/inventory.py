"""Property, room and bed schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PropertyCreate(BaseModel):
    """Schema for creating a property."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    city: str | None = Field(None, max_length=50)
    address_line1: str | None = Field(None, max_length=255)
    security_deposit: Decimal | None = Field(None, ge=0, decimal_places=2)


class PropertyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    name: str
    description: str | None
    city: str | None
    address_line1: str | None
    security_deposit: Decimal | None

    # Rollups
    total_rooms: int
    total_beds: int
    available_beds: int

    is_active: bool
    created_at: datetime
    updated_at: datetime


class RoomCreate(BaseModel):
    """Schema for adding a room to a property."""

    room_number: str = Field(..., min_length=1, max_length=20)
    room_type: str = Field(default="shared", pattern="^(single|double|triple|shared|dormitory)$")
    floor_number: int = Field(default=0, ge=0)
    description: str | None = None
    total_beds: int = Field(..., ge=1, le=50)
    rent_per_bed: Decimal = Field(..., gt=0, decimal_places=2)


class RoomCapacityUpdate(BaseModel):
    total_beds: int = Field(..., ge=1, le=50)


class RoomActiveUpdate(BaseModel):
    is_active: bool


class BedResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    room_id: UUID
    bed_number: str
    status: str
    current_occupant_id: UUID | None
    occupied_from: date | None
    expected_checkout: date | None


class RoomResponse(BaseModel):
    """Schema for room response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    property_id: UUID
    room_number: str
    room_type: str
    floor_number: int
    description: str | None
    rent_per_bed: Decimal

    # Rollups
    total_beds: int
    available_beds: int

    is_active: bool
    created_at: datetime
    updated_at: datetime


class RoomDetailResponse(RoomResponse):
    """Room with its beds."""

    beds: list[BedResponse]
