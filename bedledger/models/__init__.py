"""Database models."""

from bedledger.models.audit import AuditLog
from bedledger.models.booking import Booking
from bedledger.models.inventory import Bed, Property, Room

__all__ = [
    # Inventory
    "Property",
    "Room",
    "Bed",
    # Booking
    "Booking",
    # Audit
    "AuditLog",
]

from bedledger.core.immutability import register_immutability_enforcement  # noqa: E402

register_immutability_enforcement()
