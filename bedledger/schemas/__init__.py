"""Pydantic schemas for API validation."""

from bedledger.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingTransitionRequest,
)
from bedledger.schemas.inventory import (
    BedResponse,
    PropertyCreate,
    PropertyResponse,
    RoomActiveUpdate,
    RoomCapacityUpdate,
    RoomCreate,
    RoomDetailResponse,
    RoomResponse,
)

__all__ = [
    # Booking
    "BookingCreate",
    "BookingResponse",
    "BookingListResponse",
    "BookingTransitionRequest",
    # Inventory
    "PropertyCreate",
    "PropertyResponse",
    "RoomCreate",
    "RoomResponse",
    "RoomDetailResponse",
    "RoomCapacityUpdate",
    "RoomActiveUpdate",
    "BedResponse",
]
