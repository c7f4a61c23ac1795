"""Booking-related database models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repairshop.database import Base
from repairshop.domain.booking_state import BookingStatus
from repairshop.models.user import utcnow

if TYPE_CHECKING:
    from repairshop.models.car import Car


class Booking(Base):
    """Repair appointment."""

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    reference_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )  # REP-XXXXX
    car_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("cars.id"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.id"), nullable=False, index=True
    )

    # Request
    issue_desc: Mapped[str] = mapped_column(Text, nullable=False)
    preferred_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), default=BookingStatus.PENDING.value, nullable=False, index=True
    )  # PENDING, CONFIRMED, IN_PROGRESS, COMPLETED, CANCELLED

    # Customer contact
    phone_number: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255))
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    street_address: Mapped[str | None] = mapped_column(String(255))
    city: Mapped[str | None] = mapped_column(String(100))
    state: Mapped[str | None] = mapped_column(String(50))
    zip_code: Mapped[str | None] = mapped_column(String(20))
    sms_opt_in: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Vehicle context supplied by the customer
    vehicle_mileage: Mapped[int | None] = mapped_column(Integer)
    service_history_notes: Mapped[str | None] = mapped_column(Text)

    # Shop work
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    diagnosis: Mapped[str] = mapped_column(Text, default="", nullable=False)
    parts_needed: Mapped[str] = mapped_column(Text, default="", nullable=False)
    labor_hours: Mapped[float | None] = mapped_column(Numeric(6, 2, asdecimal=False))
    total_price: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))
    estimated_completion_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    car: Mapped["Car"] = relationship("Car", lazy="raise")


class BookingUpdate(Base):
    """Append-only activity record attached to a booking."""

    __tablename__ = "booking_updates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    old_status: Mapped[str | None] = mapped_column(String(20))
    new_status: Mapped[str | None] = mapped_column(String(20))
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
