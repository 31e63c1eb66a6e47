"""Booking reference generation utilities."""

import random
import string
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bedledger.config import settings
from bedledger.core.exceptions import ReferenceCollision

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
_rng = random.SystemRandom()


def generate_booking_reference(prefix: str | None = None, now: datetime | None = None) -> str:
    """Generate a booking reference.

    Format is prefix + UTC timestamp + random suffix, so references sort by
    creation time and two references minted in the same second still differ.

    Returns:
        str: Reference like 'BK20260115093012K9M2QX'
    """
    prefix = settings.booking_reference_prefix if prefix is None else prefix
    timestamp = (now or datetime.now(UTC)).strftime("%Y%m%d%H%M%S")
    random_part = "".join(_rng.choices(REFERENCE_ALPHABET, k=6))
    return f"{prefix}{timestamp}{random_part}"


async def generate_unique_booking_reference(db: AsyncSession) -> str:
    """Generate a booking reference not yet present in the ledger.

    Args:
        db: Database session for uniqueness check

    Returns:
        str: Unused booking reference

    Raises:
        ReferenceCollision: every attempt hit an existing reference
    """
    from bedledger.models.booking import Booking

    for _ in range(settings.booking_reference_max_attempts):
        reference = generate_booking_reference()
        result = await db.execute(
            select(Booking.id).where(Booking.booking_reference == reference)
        )
        if result.scalar_one_or_none() is None:
            return reference
    raise ReferenceCollision(reference)
