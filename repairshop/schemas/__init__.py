"""Pydantic schemas for API requests and responses."""

from repairshop.schemas.booking import (
    BookingChangeResponse,
    BookingCreate,
    BookingResponse,
    BookingStats,
    BookingStatusUpdate,
    BookingUpdateResponse,
    CommentCreate,
    NotificationOutcome,
    NotificationRequest,
    NotificationResponse,
)
from repairshop.schemas.car import (
    AdminCarCreate,
    AdminCarUpdate,
    CarCreate,
    CarDetailResponse,
    CarResponse,
    CarUpdate,
)
from repairshop.schemas.user import GoogleAuthRequest, TokenResponse, UserResponse

__all__ = [
    # Booking
    "BookingCreate",
    "BookingStatusUpdate",
    "BookingResponse",
    "BookingChangeResponse",
    "BookingUpdateResponse",
    "BookingStats",
    "CommentCreate",
    "NotificationOutcome",
    "NotificationRequest",
    "NotificationResponse",
    # Car
    "CarCreate",
    "CarUpdate",
    "AdminCarCreate",
    "AdminCarUpdate",
    "CarResponse",
    "CarDetailResponse",
    # User
    "GoogleAuthRequest",
    "TokenResponse",
    "UserResponse",
]
