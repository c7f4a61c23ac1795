"""Booking state machine."""

from enum import Enum

from repairshop.core.exceptions import InvalidBookingStatus


class BookingStatus(str, Enum):
    """Repair booking lifecycle states."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class UpdateType(str, Enum):
    """Kinds of booking activity records."""

    STATUS_CHANGE = "STATUS_CHANGE"
    COMMENT = "COMMENT"
    PRICE_UPDATE = "PRICE_UPDATE"
    DIAGNOSIS = "DIAGNOSIS"
    NOTIFICATION = "NOTIFICATION"
    SYSTEM = "SYSTEM"


TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})

BOOKING_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED},
    BookingStatus.IN_PROGRESS: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}


def is_terminal(status: str) -> bool:
    return BookingStatus(status) in TERMINAL_STATUSES


def assert_booking_transition(current: str, target: str, strict: bool = True) -> None:
    """Reject a status move the lifecycle does not allow.

    Terminal states never move. In strict mode only the forward edges and
    cancellation are accepted; otherwise any move between live states is.
    """
    current_status = BookingStatus(current)
    target_status = BookingStatus(target)
    if current_status in TERMINAL_STATUSES:
        raise InvalidBookingStatus(
            f"Booking is {current_status.value} and can no longer change status"
        )
    if strict and target_status not in BOOKING_TRANSITIONS[current_status]:
        raise InvalidBookingStatus(
            f"Invalid booking transition: {current_status.value} → {target_status.value}"
        )
