"""Booking reference generation tests."""

import re

import pytest

from repairshop.core.exceptions import DependencyError
from repairshop.utils import booking_number
from repairshop.utils.booking_number import (
    generate_booking_reference,
    generate_unique_booking_reference,
)


def test_reference_format():
    for _ in range(50):
        assert re.fullmatch(r"REP-[A-Z0-9]{5}", generate_booking_reference())


def test_reference_draws_from_secrets(monkeypatch):
    picks = iter("K7Q2Z")
    monkeypatch.setattr(booking_number.secrets, "choice", lambda chars: next(picks))

    assert generate_booking_reference() == "REP-K7Q2Z"


def test_reference_prefix():
    assert generate_booking_reference("BK").startswith("BK-")


async def test_unique_reference_retries_on_collision():
    seen = []

    async def exists(reference: str) -> bool:
        seen.append(reference)
        return len(seen) < 3

    reference = await generate_unique_booking_reference(exists, max_attempts=5)

    assert len(seen) == 3
    assert reference == seen[-1]


async def test_unique_reference_gives_up():
    async def exists(reference: str) -> bool:
        return True

    with pytest.raises(DependencyError):
        await generate_unique_booking_reference(exists, max_attempts=2)
