"""Booking-related Pydantic schemas."""

from datetime import UTC, datetime
from uuid import UUID

from pydantic import EmailStr, Field, ValidationInfo, field_validator

from repairshop.config import get_settings
from repairshop.domain.booking_state import BookingStatus, UpdateType
from repairshop.schemas.base import CamelModel
from repairshop.schemas.car import CarResponse


def _as_utc(v: datetime | None) -> datetime | None:
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=UTC)
    return v


class BookingCreate(CamelModel):
    """Schema for a customer booking request."""

    car_id: UUID
    issue_desc: str
    preferred_date: datetime
    phone_number: str = Field(..., max_length=30)
    email: EmailStr
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    street_address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=50)
    zip_code: str | None = Field(None, max_length=20)
    sms_opt_in: bool = False
    vehicle_mileage: int | None = Field(None, ge=0)
    service_history_notes: str | None = None

    @field_validator("issue_desc")
    @classmethod
    def validate_issue_desc(cls, v: str, info: ValidationInfo) -> str:
        v = v.strip()
        # Callers may pass their own minimum in the validation context
        min_length = (info.context or {}).get(
            "issue_description_min_length", get_settings().issue_description_min_length
        )
        if len(v) < min_length:
            raise ValueError(f"Issue description is required (min {min_length} characters)")
        return v

    @field_validator("phone_number", "first_name", "last_name")
    @classmethod
    def validate_required_text(cls, v: str, info) -> str:
        v = v.strip()
        if not v:
            raise ValueError(f"{info.field_name.replace('_', ' ').capitalize()} is required")
        return v

    @field_validator("preferred_date")
    @classmethod
    def validate_preferred_date(cls, v: datetime) -> datetime:
        return _as_utc(v)


class BookingStatusUpdate(CamelModel):
    """Admin update of status and repair details.

    Only the fields present in the payload are applied.
    """

    status: BookingStatus | None = None
    reason: str | None = Field(None, max_length=500)
    notes: str | None = None
    preferred_date: datetime | None = None
    phone_number: str | None = Field(None, max_length=30)
    total_price: float | None = Field(None, ge=0)
    estimated_completion_date: datetime | None = None
    diagnosis: str | None = None
    parts_needed: str | None = None
    labor_hours: float | None = Field(None, ge=0)
    sms_opt_in: bool | None = None

    @field_validator("preferred_date", "estimated_completion_date")
    @classmethod
    def validate_dates(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)


class BookingResponse(CamelModel):
    """Schema for booking response."""

    id: UUID
    reference_number: str
    car_id: UUID
    user_id: str
    car: CarResponse | None = None

    issue_desc: str
    preferred_date: datetime
    status: BookingStatus

    phone_number: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    street_address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    sms_opt_in: bool
    vehicle_mileage: int | None = None
    service_history_notes: str | None = None

    notes: str
    diagnosis: str
    parts_needed: str
    labor_hours: float | None = None
    total_price: float | None = None
    estimated_completion_date: datetime | None = None

    created_at: datetime
    updated_at: datetime


class NotificationOutcome(CamelModel):
    """Result of the SMS side step."""

    sent: bool
    message_id: str | None = None
    error: str | None = None


class BookingChangeResponse(BookingResponse):
    """Booking after an update, with the SMS outcome when one was attempted."""

    notification: NotificationOutcome | None = None


class BookingUpdateResponse(CamelModel):
    """Schema for a booking activity record."""

    id: UUID
    booking_id: UUID
    type: UpdateType
    content: str
    old_status: BookingStatus | None = None
    new_status: BookingStatus | None = None
    created_by: str
    is_public: bool
    created_at: datetime


class CommentCreate(CamelModel):
    """Schema for an admin comment on a booking."""

    content: str = Field(..., min_length=1, max_length=5000)
    is_public: bool = False
    type: UpdateType = UpdateType.COMMENT

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Content is required")
        return v


class NotificationRequest(CamelModel):
    """Schema for a free-text SMS to the customer."""

    message: str = Field(..., max_length=1600)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message is required")
        return v


class NotificationResponse(CamelModel):
    """Activity record written for a free-text SMS, plus delivery outcome."""

    update: BookingUpdateResponse
    notification: NotificationOutcome


class BookingStats(CamelModel):
    """Admin dashboard counters."""

    total: int
    by_status: dict[str, int]
    completed_revenue: float
