"""Internal health and maintenance endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from bedledger.api.deps import get_current_admin, get_db
from bedledger.core.permissions import Principal
from bedledger.services.inventory_health_service import inventory_health_service
from bedledger.services.rollup_service import rollup_service

router = APIRouter()


class HealthCheckResponse(BaseModel):
    """Inventory health check response."""

    status: str
    checks: list[dict]
    counts: dict
    timestamp: str


class ReconcileResponse(BaseModel):
    rooms_checked: int
    rooms_corrected: int
    properties_checked: int
    properties_corrected: int


@router.get("/health/inventory", response_model=HealthCheckResponse)
async def get_inventory_health(
    principal: Annotated[Principal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HealthCheckResponse:
    """Run and return the inventory health check (admin only, read-only)."""
    result = await inventory_health_service.run_all_checks(db)
    return HealthCheckResponse(
        status=result["status"].value,
        checks=result["checks"],
        counts=result["counts"],
        timestamp=result["timestamp"],
    )


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_inventory(
    principal: Annotated[Principal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReconcileResponse:
    """Recompute every room and property counter from bed state (admin only)."""
    result = await rollup_service.reconcile_all(db)
    return ReconcileResponse(
        rooms_checked=result.rooms_checked,
        rooms_corrected=result.rooms_corrected,
        properties_checked=result.properties_checked,
        properties_corrected=result.properties_corrected,
    )
