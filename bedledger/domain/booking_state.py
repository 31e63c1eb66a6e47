"""Booking state machine and the bed state each booking status implies."""

from enum import Enum

from bedledger.core.exceptions import InvalidTransition


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"


class BedStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    OCCUPIED = "occupied"


BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CHECKED_IN, BookingStatus.CANCELLED}),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT}),
    BookingStatus.CHECKED_OUT: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

# Statuses that hold a bed
ACTIVE_BOOKING_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN}
)

TERMINAL_BOOKING_STATUSES: frozenset[BookingStatus] = frozenset(
    status for status, allowed in BOOKING_TRANSITIONS.items() if not allowed
)

# Direct cancellation is only allowed before check-in
CANCELLABLE_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED}
)

BED_STATUS_FOR_BOOKING: dict[BookingStatus, BedStatus] = {
    BookingStatus.PENDING: BedStatus.RESERVED,
    BookingStatus.CONFIRMED: BedStatus.RESERVED,
    BookingStatus.CHECKED_IN: BedStatus.OCCUPIED,
    BookingStatus.CHECKED_OUT: BedStatus.AVAILABLE,
    BookingStatus.CANCELLED: BedStatus.AVAILABLE,
}


def active_status_values() -> list[str]:
    """Raw column values of the bed-holding statuses."""
    return sorted(status.value for status in ACTIVE_BOOKING_STATUSES)


def status_value(status: str | Enum) -> str:
    """Plain column value of a status given as enum member or raw string."""
    return status.value if isinstance(status, Enum) else status


def can_transition(current: str | Enum, target: str | Enum) -> bool:
    try:
        allowed = BOOKING_TRANSITIONS[BookingStatus(status_value(current))]
        return BookingStatus(status_value(target)) in allowed
    except ValueError:
        return False


def assert_booking_transition(current: str | Enum, target: str | Enum) -> None:
    if not can_transition(current, target):
        raise InvalidTransition(status_value(current), status_value(target))


def assert_cancellable(current: str | Enum) -> None:
    current = status_value(current)
    if current not in {status.value for status in CANCELLABLE_STATUSES}:
        raise InvalidTransition(
            current,
            BookingStatus.CANCELLED.value,
            detail=f"Cannot cancel booking with status: {current}",
        )
