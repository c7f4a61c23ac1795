"""Booking payload validation.

Wraps the booking schemas so that callers outside the HTTP layer (services,
tasks, scripts) get the same rules and the same field-level violation list
that API clients see.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from repairshop.core.exceptions import ValidationError
from repairshop.schemas.booking import BookingCreate, BookingStatusUpdate

# Location prefixes FastAPI adds to request errors
_LOCATION_SOURCES = {"body", "query", "path", "header", "cookie"}


def format_violations(errors: Sequence[Mapping[str, Any]]) -> list[dict[str, str]]:
    """Turn pydantic error dicts into ``{"field", "message"}`` pairs."""
    violations = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in _LOCATION_SOURCES]
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        violations.append({"field": ".".join(loc) or "__root__", "message": message})
    return violations


def _validate(
    schema: type[BaseModel],
    payload: BaseModel | Mapping[str, Any],
    context: dict[str, Any] | None = None,
) -> Any:
    if isinstance(payload, schema) and context is None:
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(by_alias=True, exclude_unset=True)
    try:
        return schema.model_validate(payload, context=context)
    except PydanticValidationError as e:
        raise ValidationError(errors=format_violations(e.errors())) from e


def validate_booking_create(
    payload: BookingCreate | Mapping[str, Any],
    issue_description_min_length: int | None = None,
) -> BookingCreate:
    """Validate a booking creation payload.

    A schema instance is re-checked when an explicit issue length minimum is
    given, since it was parsed against the process settings.
    """
    context = None
    if issue_description_min_length is not None:
        context = {"issue_description_min_length": issue_description_min_length}
    return _validate(BookingCreate, payload, context)


def validate_booking_update(payload: BookingStatusUpdate | Mapping[str, Any]) -> BookingStatusUpdate:
    """Validate an admin status/details update payload."""
    return _validate(BookingStatusUpdate, payload)
