"""Booking endpoints."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from repairshop.api.deps import CurrentAdmin, CurrentUser, get_booking_service
from repairshop.core.middleware import status_lookup_limiter
from repairshop.domain.booking_state import BookingStatus
from repairshop.schemas.booking import (
    BookingChangeResponse,
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
    BookingUpdateResponse,
    CommentCreate,
    NotificationOutcome,
    NotificationRequest,
    NotificationResponse,
)
from repairshop.services.booking_service import BookingChange, BookingService

router = APIRouter()

Bookings = Annotated[BookingService, Depends(get_booking_service)]


def _change_response(change: BookingChange) -> BookingChangeResponse:
    response = BookingChangeResponse.model_validate(change.booking)
    if change.notification is not None:
        response.notification = NotificationOutcome.model_validate(change.notification)
    return response


@router.get("", response_model=list[BookingResponse])
async def list_bookings(
    current_user: CurrentAdmin,
    bookings: Bookings,
    status_filter: Annotated[BookingStatus | None, Query(alias="status")] = None,
    from_date: Annotated[datetime | None, Query(alias="fromDate")] = None,
    to_date: Annotated[datetime | None, Query(alias="toDate")] = None,
) -> list[BookingResponse]:
    """List all bookings (admin)."""
    results = await bookings.list_all(
        current_user,
        status=status_filter,
        from_date=from_date,
        to_date=to_date,
    )
    return [BookingResponse.model_validate(b) for b in results]


@router.get("/my", response_model=list[BookingResponse])
async def list_my_bookings(current_user: CurrentUser, bookings: Bookings) -> list[BookingResponse]:
    """List the signed-in user's bookings."""
    results = await bookings.list_mine(current_user)
    return [BookingResponse.model_validate(b) for b in results]


@router.get(
    "/status",
    response_model=BookingResponse,
    dependencies=[Depends(status_lookup_limiter)],
)
async def lookup_booking_status(
    bookings: Bookings,
    reference_number: Annotated[str | None, Query(alias="referenceNumber")] = None,
    phone_number: Annotated[str | None, Query(alias="phoneNumber")] = None,
) -> BookingResponse:
    """Public status lookup by reference and phone number."""
    booking = await bookings.lookup_by_reference(reference_number, phone_number)
    return BookingResponse.model_validate(booking)


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreate,
    current_user: CurrentUser,
    bookings: Bookings,
) -> BookingResponse:
    """Book a repair appointment for one of the user's cars."""
    booking = await bookings.create(data, current_user)
    return BookingResponse.model_validate(booking)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: UUID, current_user: CurrentUser, bookings: Bookings) -> BookingResponse:
    """Get a booking (owner or admin)."""
    booking = await bookings.get(booking_id, current_user)
    return BookingResponse.model_validate(booking)


@router.patch("/{booking_id}", response_model=BookingChangeResponse)
async def update_booking(
    booking_id: UUID,
    data: BookingStatusUpdate,
    current_user: CurrentAdmin,
    bookings: Bookings,
) -> BookingChangeResponse:
    """Update status and repair details (admin)."""
    change = await bookings.update_status(booking_id, data, current_user)
    return _change_response(change)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking(booking_id: UUID, current_user: CurrentAdmin, bookings: Bookings) -> None:
    """Delete a booking and its activity (admin)."""
    await bookings.delete(booking_id, current_user)


@router.post("/{booking_id}/cancel", response_model=BookingChangeResponse)
async def cancel_booking(
    booking_id: UUID,
    current_user: CurrentUser,
    bookings: Bookings,
) -> BookingChangeResponse:
    """Cancel one of the user's bookings."""
    change = await bookings.cancel(booking_id, current_user)
    return _change_response(change)


@router.post("/{booking_id}/notify", response_model=NotificationResponse)
async def send_notification(
    booking_id: UUID,
    request: NotificationRequest,
    current_user: CurrentAdmin,
    bookings: Bookings,
) -> NotificationResponse:
    """Send a free-text SMS to the customer (admin)."""
    result = await bookings.send_custom_notification(booking_id, request.message, current_user)
    return NotificationResponse(
        update=BookingUpdateResponse.model_validate(result.update),
        notification=NotificationOutcome.model_validate(result.notification),
    )


@router.get("/{booking_id}/updates", response_model=list[BookingUpdateResponse])
async def list_booking_updates(
    booking_id: UUID,
    current_user: CurrentUser,
    bookings: Bookings,
) -> list[BookingUpdateResponse]:
    """Activity for a booking; customers see public records only."""
    updates = await bookings.list_updates(booking_id, current_user)
    return [BookingUpdateResponse.model_validate(u) for u in updates]


@router.post(
    "/{booking_id}/comments",
    response_model=BookingUpdateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    booking_id: UUID,
    data: CommentCreate,
    current_user: CurrentAdmin,
    bookings: Bookings,
) -> BookingUpdateResponse:
    """Add an activity record to a booking (admin)."""
    update = await bookings.add_comment(booking_id, data, current_user)
    return BookingUpdateResponse.model_validate(update)
