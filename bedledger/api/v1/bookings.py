"""Booking endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from bedledger.api.deps import get_current_owner, get_current_principal, get_db
from bedledger.core.middleware import claim_limiter
from bedledger.core.permissions import Principal
from bedledger.domain.booking_state import BookingStatus
from bedledger.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingTransitionRequest,
)
from bedledger.services.allocation_service import allocation_service
from bedledger.services.booking_service import booking_service
from bedledger.services.lifecycle_service import lifecycle_service

router = APIRouter()


@router.post(
    "/",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(claim_limiter)],
)
async def claim_bed(
    booking_data: BookingCreate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingResponse:
    """Claim a bed. The booking starts PENDING and the bed becomes RESERVED."""
    booking = await allocation_service.claim_bed(
        db,
        property_id=booking_data.property_id,
        room_id=booking_data.room_id,
        bed_id=booking_data.bed_id,
        requester_id=principal.id,
        check_in_date=booking_data.check_in_date,
        check_out_date=booking_data.check_out_date,
        notes=booking_data.notes,
    )
    return BookingResponse.model_validate(booking)


@router.get("/", response_model=BookingListResponse)
async def list_my_bookings(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> BookingListResponse:
    """List the caller's bookings, newest first."""
    bookings, total = await booking_service.list_for_requester(
        db, principal.id, page=page, page_size=page_size
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/owner", response_model=BookingListResponse)
async def list_owner_bookings(
    principal: Annotated[Principal, Depends(get_current_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: BookingStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> BookingListResponse:
    """List bookings across the caller's properties."""
    bookings, total = await booking_service.list_for_owner(
        db, principal.id, status=status_filter, page=page, page_size=page_size
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/reference/{booking_reference}", response_model=BookingResponse)
async def get_booking_by_reference(
    booking_reference: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingResponse:
    booking = await booking_service.get_booking_by_reference(db, booking_reference)
    return BookingResponse.model_validate(booking)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingResponse:
    """Get booking details (requester or property owner)."""
    booking = await booking_service.get_booking(db, booking_id, principal.id)
    return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/status", response_model=BookingResponse)
async def transition_booking(
    booking_id: UUID,
    request: BookingTransitionRequest,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingResponse:
    """Move a booking to a new status (confirm, check in, check out, cancel)."""
    booking = await lifecycle_service.transition_booking(
        db, booking_id, principal.id, request.status
    )
    return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/cancel", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_booking(
    booking_id: UUID,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Response:
    """Cancel a PENDING or CONFIRMED booking (requester or property owner)."""
    await lifecycle_service.cancel_booking(db, booking_id, principal.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
