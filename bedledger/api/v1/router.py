"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from bedledger.api.v1 import bookings, internal, inventory

api_router = APIRouter()

# Inventory
api_router.include_router(inventory.router, tags=["Inventory"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Internal
api_router.include_router(internal.router, prefix="/internal", tags=["Internal"])
