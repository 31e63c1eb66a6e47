"""Booking audit trail service."""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from bedledger.models.audit import AuditLog


class AuditService:
    """Service for append-only audit logging."""

    async def log_action(
        self,
        db: AsyncSession,
        actor_id: UUID | None,
        action: str,
        resource_type: str,
        resource_id: UUID,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Log an action (immutable).

        Args:
            db: Database session
            actor_id: Account performing the action
            action: Action name (e.g., "booking_confirmed")
            resource_type: Resource type (e.g., "booking", "room")
            resource_id: Resource ID
            old_values: Previous state
            new_values: New state

        Returns:
            Created audit log entry
        """
        audit = AuditLog(
            actor_id=actor_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values=old_values,
            new_values=new_values,
        )
        db.add(audit)
        return audit

    async def log_booking_action(
        self,
        db: AsyncSession,
        actor_id: UUID,
        booking_id: UUID,
        old_status: str | None,
        new_status: str,
        bed_id: UUID | None = None,
    ) -> AuditLog:
        """Log a booking status change."""
        new_values: dict[str, Any] = {"status": new_status}
        if bed_id is not None:
            new_values["bed_id"] = str(bed_id)
        return await self.log_action(
            db=db,
            actor_id=actor_id,
            action=f"booking_{new_status}",
            resource_type="booking",
            resource_id=booking_id,
            old_values={"status": old_status} if old_status else None,
            new_values=new_values,
        )


audit_service = AuditService()
