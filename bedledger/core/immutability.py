"""Immutability enforcement for booking history using SQLAlchemy events."""

import logging
from datetime import UTC, datetime

from sqlalchemy import event, inspect

from bedledger.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Booking terms fixed at claim time
IMMUTABLE_BOOKING_FIELDS = (
    "booking_reference",
    "requester_id",
    "property_id",
    "check_in_date",
    "monthly_rent",
    "security_deposit",
)

_registered = False


class ImmutabilityViolationError(ValidationError):
    """Raised when attempting to modify immutable records."""

    def __init__(self, model_name: str, operation: str, record_id: str):
        self.model_name = model_name
        self.operation = operation
        self.record_id = record_id
        super().__init__(
            f"Immutability violation: Cannot {operation} {model_name} record {record_id}."
        )


def _log_immutability_violation(model_name: str, operation: str, record_id: str) -> None:
    """Log immutability violation for audit purposes."""
    logger.error(
        f"IMMUTABILITY_VIOLATION: Attempted to {operation} {model_name} "
        f"record_id={record_id} at {datetime.now(UTC).isoformat()}"
    )


def _reject(model_name: str, operation: str, record_id: str) -> None:
    _log_immutability_violation(model_name, operation, record_id)
    raise ImmutabilityViolationError(model_name, operation, record_id)


def register_immutability_enforcement() -> None:
    """Register SQLAlchemy event listeners for immutability enforcement.

    Must be called after models are imported but before session use.
    """
    global _registered
    if _registered:
        return

    from bedledger.models.audit import AuditLog
    from bedledger.models.booking import Booking

    # ============ Booking: snapshot fields frozen, never deleted ============

    @event.listens_for(Booking, "before_update")
    def prevent_booking_terms_update(mapper, connection, target):
        """Reject changes to the terms captured at claim time."""
        state = inspect(target)
        changed = [
            name for name in IMMUTABLE_BOOKING_FIELDS
            if state.attrs[name].history.has_changes()
        ]
        if changed:
            _reject("Booking", f"UPDATE {', '.join(changed)} of", str(target.id))

    @event.listens_for(Booking, "before_delete")
    def prevent_booking_delete(mapper, connection, target):
        """Bookings are retained for history."""
        _reject("Booking", "DELETE", str(target.id))

    # ============ AuditLog: Append-Only ============

    @event.listens_for(AuditLog, "before_update")
    def prevent_audit_update(mapper, connection, target):
        """Prevent updates to AuditLog (append-only)."""
        _reject("AuditLog", "UPDATE", str(target.id))

    @event.listens_for(AuditLog, "before_delete")
    def prevent_audit_delete(mapper, connection, target):
        """Prevent deletion of AuditLog (append-only)."""
        _reject("AuditLog", "DELETE", str(target.id))

    _registered = True
    logger.info("Immutability enforcement registered for booking history")
