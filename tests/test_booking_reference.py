"""Booking reference generation."""

import re
from datetime import UTC, datetime

import pytest

from bedledger.config import settings
from bedledger.core.exceptions import ReferenceCollision
from bedledger.utils.booking_reference import (
    generate_booking_reference,
    generate_unique_booking_reference,
)

REFERENCE_PATTERN = re.compile(r"^BK\d{14}[A-Z0-9]{6}$")


def test_reference_format():
    reference = generate_booking_reference(now=datetime(2026, 1, 15, 9, 30, 12, tzinfo=UTC))

    assert reference.startswith("BK20260115093012")
    assert REFERENCE_PATTERN.match(reference)


def test_custom_prefix():
    assert generate_booking_reference(prefix="TST").startswith("TST")


def test_references_sort_by_creation_time():
    earlier = generate_booking_reference(now=datetime(2026, 1, 1, tzinfo=UTC))
    later = generate_booking_reference(now=datetime(2026, 1, 2, tzinfo=UTC))
    assert earlier < later


def test_same_second_references_differ():
    now = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)
    references = {generate_booking_reference(now=now) for _ in range(200)}
    assert len(references) == 200


async def test_unique_reference_skips_existing(inventory, claim, tenant_id, session_factory, monkeypatch):
    booking = await claim(inventory, tenant_id)
    fresh = "BK20260101000000ZZZZZZ"
    candidates = iter([booking.booking_reference, fresh])
    monkeypatch.setattr(
        "bedledger.utils.booking_reference.generate_booking_reference",
        lambda: next(candidates),
    )

    async with session_factory() as db:
        assert await generate_unique_booking_reference(db) == fresh


async def test_unique_reference_gives_up_after_max_attempts(
    inventory, claim, tenant_id, session_factory, monkeypatch
):
    booking = await claim(inventory, tenant_id)
    calls = []

    def taken():
        calls.append(1)
        return booking.booking_reference

    monkeypatch.setattr("bedledger.utils.booking_reference.generate_booking_reference", taken)
    monkeypatch.setattr(settings, "booking_reference_max_attempts", 3)

    async with session_factory() as db:
        with pytest.raises(ReferenceCollision):
            await generate_unique_booking_reference(db)

    assert len(calls) == 3
