"""Vehicle-related Pydantic schemas."""

from datetime import UTC, datetime
from uuid import UUID

from pydantic import Field, field_validator

from repairshop.schemas.base import CamelModel


class CarBase(CamelModel):
    """Base vehicle schema."""

    make: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: int
    license_plate: str = Field(..., min_length=1, max_length=20)
    mileage: int | None = Field(None, ge=0)
    vin: str | None = Field(None, max_length=17)
    color: str | None = Field(None, max_length=50)

    @field_validator("year")
    @classmethod
    def validate_year(cls, v: int) -> int:
        latest = datetime.now(UTC).year + 1
        if v < 1900 or v > latest:
            raise ValueError(f"Year must be between 1900 and {latest}")
        return v

    @field_validator("make", "model", "license_plate")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v


class CarCreate(CarBase):
    """Schema for registering a vehicle."""


class CarUpdate(CarBase):
    """Schema for replacing a vehicle's details."""


class AdminCarCreate(CarBase):
    """Admin registers a vehicle on behalf of a customer."""

    user_id: str = Field(..., min_length=1)


class AdminCarUpdate(CarBase):
    """Admin update; may move the vehicle to another owner."""

    user_id: str | None = None


class CarResponse(CarBase):
    """Schema for vehicle response."""

    id: UUID
    user_id: str
    created_at: datetime
    updated_at: datetime


class CarDetailResponse(CarResponse):
    """Vehicle with the number of bookings referencing it."""

    bookings_count: int = 0
