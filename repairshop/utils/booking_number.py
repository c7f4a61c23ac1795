"""Booking reference generation."""

import secrets
import string
from collections.abc import Awaitable, Callable

from repairshop.config import settings
from repairshop.core.exceptions import DependencyError

REFERENCE_CHARS = string.ascii_uppercase + string.digits
REFERENCE_LENGTH = 5


def generate_booking_reference(prefix: str | None = None) -> str:
    """Generate a booking reference like 'REP-A3B7K'."""
    random_part = "".join(secrets.choice(REFERENCE_CHARS) for _ in range(REFERENCE_LENGTH))
    return f"{prefix or settings.booking_reference_prefix}-{random_part}"


async def generate_unique_booking_reference(
    exists: Callable[[str], Awaitable[bool]],
    prefix: str | None = None,
    max_attempts: int | None = None,
) -> str:
    """Generate a booking reference not yet used in storage.

    Args:
        exists: Storage lookup returning True when a reference is taken
        prefix: Reference prefix, defaults to the configured one
        max_attempts: Attempts before giving up

    Returns:
        str: Unused booking reference
    """
    attempts = max_attempts or settings.reference_max_attempts
    for _ in range(attempts):
        reference = generate_booking_reference(prefix)
        if not await exists(reference):
            return reference
    raise DependencyError("storage", f"could not allocate a unique booking reference after {attempts} attempts")
