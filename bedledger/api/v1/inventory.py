"""Property and room management endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from bedledger.api.deps import get_current_owner, get_current_principal, get_db
from bedledger.core.permissions import Principal
from bedledger.schemas.inventory import (
    PropertyCreate,
    PropertyResponse,
    RoomActiveUpdate,
    RoomCapacityUpdate,
    RoomCreate,
    RoomDetailResponse,
    RoomResponse,
)
from bedledger.services.inventory_service import inventory_service

router = APIRouter()


@router.post(
    "/properties", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED
)
async def create_property(
    property_data: PropertyCreate,
    principal: Annotated[Principal, Depends(get_current_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PropertyResponse:
    prop = await inventory_service.create_property(
        db,
        owner_id=principal.id,
        name=property_data.name,
        security_deposit=property_data.security_deposit,
        city=property_data.city,
        address_line1=property_data.address_line1,
        description=property_data.description,
    )
    return PropertyResponse.model_validate(prop)


@router.get("/properties/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: UUID,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PropertyResponse:
    """Get a property with its bed counters."""
    prop = await inventory_service.get_property(db, property_id)
    return PropertyResponse.model_validate(prop)


@router.post(
    "/properties/{property_id}/rooms",
    response_model=RoomDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_room(
    property_id: UUID,
    room_data: RoomCreate,
    principal: Annotated[Principal, Depends(get_current_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoomDetailResponse:
    """Add a room; one available bed is created per unit of capacity."""
    room = await inventory_service.create_room(
        db,
        property_id,
        principal.id,
        room_number=room_data.room_number,
        total_beds=room_data.total_beds,
        rent_per_bed=room_data.rent_per_bed,
        room_type=room_data.room_type,
        floor_number=room_data.floor_number,
        description=room_data.description,
    )
    room = await inventory_service.get_room(db, room.id)
    return RoomDetailResponse.model_validate(room)


@router.get("/rooms/{room_id}", response_model=RoomDetailResponse)
async def get_room(
    room_id: UUID,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoomDetailResponse:
    room = await inventory_service.get_room(db, room_id)
    return RoomDetailResponse.model_validate(room)


@router.patch("/rooms/{room_id}/capacity", response_model=RoomDetailResponse)
async def update_room_capacity(
    room_id: UUID,
    request: RoomCapacityUpdate,
    principal: Annotated[Principal, Depends(get_current_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoomDetailResponse:
    """Grow a room's capacity. Shrinking is rejected."""
    await inventory_service.update_room_capacity(db, room_id, principal.id, request.total_beds)
    room = await inventory_service.get_room(db, room_id)
    return RoomDetailResponse.model_validate(room)


@router.patch("/rooms/{room_id}/active", response_model=RoomResponse)
async def set_room_active(
    room_id: UUID,
    request: RoomActiveUpdate,
    principal: Annotated[Principal, Depends(get_current_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoomResponse:
    room = await inventory_service.set_room_active(db, room_id, principal.id, request.is_active)
    return RoomResponse.model_validate(room)


@router.delete("/rooms/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_id: UUID,
    principal: Annotated[Principal, Depends(get_current_owner)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Response:
    """Delete a room whose beds hold no active booking."""
    await inventory_service.delete_room(db, room_id, principal.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
