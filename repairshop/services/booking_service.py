"""Booking lifecycle service.

Owns the booking state machine and every operation that reads or mutates a
booking. Storage is injected as a ``RepairShopStore`` and SMS goes through the
``NotificationService``; status SMS are sent after the booking and its
activity records have been written and never undo them.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo

from repairshop.config import Settings, get_settings
from repairshop.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from repairshop.domain.booking_state import BookingStatus, UpdateType, assert_booking_transition
from repairshop.domain.booking_validator import validate_booking_create, validate_booking_update
from repairshop.models.booking import Booking, BookingUpdate
from repairshop.models.user import User
from repairshop.repositories.base import BookingFilter, RepairShopStore
from repairshop.schemas.booking import BookingCreate, BookingStatusUpdate, CommentCreate
from repairshop.services.notification_service import (
    DispatchResult,
    NotificationService,
    build_reminder_message,
    notification_service,
)
from repairshop.utils.booking_number import generate_unique_booking_reference

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"

# Text fields stored as empty strings rather than NULL
_TEXT_FIELDS = ("notes", "diagnosis", "parts_needed")


@dataclass
class BookingChange:
    """A booking after a mutation plus the SMS outcome, if one was attempted."""

    booking: Booking
    notification: DispatchResult | None = None


@dataclass
class CustomNotification:
    """Activity record written for a free-text SMS and its delivery outcome."""

    update: BookingUpdate
    notification: DispatchResult


class BookingService:
    """Service for the booking lifecycle."""

    def __init__(
        self,
        store: RepairShopStore,
        notifier: NotificationService | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.store = store
        self.notifier = notifier or notification_service
        self.settings = settings or get_settings()

    # ==================== CUSTOMER ====================

    async def create(
        self,
        payload: BookingCreate | Mapping[str, Any],
        requester: User,
    ) -> Booking:
        """Create a PENDING booking for one of the requester's cars."""
        data = validate_booking_create(
            payload, issue_description_min_length=self.settings.issue_description_min_length
        )

        car = await self.store.get_car(data.car_id)
        if not car:
            raise NotFoundError("Car", str(data.car_id))
        if car.user_id != requester.id:
            raise ForbiddenError("You can only book service for your own vehicles")

        reference = await generate_unique_booking_reference(
            self.store.reference_exists,
            prefix=self.settings.booking_reference_prefix,
            max_attempts=self.settings.reference_max_attempts,
        )

        booking = Booking(
            reference_number=reference,
            car_id=car.id,
            user_id=requester.id,
            issue_desc=data.issue_desc,
            preferred_date=data.preferred_date,
            status=BookingStatus.PENDING.value,
            phone_number=data.phone_number,
            email=str(data.email),
            first_name=data.first_name,
            last_name=data.last_name,
            street_address=data.street_address,
            city=data.city,
            state=data.state,
            zip_code=data.zip_code,
            sms_opt_in=data.sms_opt_in,
            vehicle_mileage=data.vehicle_mileage,
            service_history_notes=data.service_history_notes,
            notes="",
            diagnosis="",
            parts_needed="",
        )
        booking.car = car
        await self.store.add_booking(booking)

        await self._record(booking, UpdateType.SYSTEM, "Booking created", SYSTEM_ACTOR)
        logger.info(f"Booking {reference} created for car {car.id} by {requester.id}")

        if self.settings.notify_on_create:
            await self.notifier.notify_status_change(booking)

        return booking

    async def get(self, booking_id: UUID, requester: User) -> Booking:
        """Get a booking visible to the requester (owner or admin)."""
        booking = await self._get_booking(booking_id)
        if not requester.is_admin and booking.user_id != requester.id:
            raise ForbiddenError("You don't have permission to view this booking")
        return booking

    async def list_mine(self, requester: User) -> list[Booking]:
        """The requester's bookings, newest first."""
        return await self.store.list_bookings(BookingFilter(user_id=requester.id))

    async def cancel(self, booking_id: UUID, requester: User) -> BookingChange:
        """Owner cancels their booking."""
        booking = await self._get_booking(booking_id)
        if booking.user_id != requester.id:
            raise ForbiddenError("You can only cancel your own bookings")

        update = BookingStatusUpdate(status=BookingStatus.CANCELLED)
        return await self._apply_update(booking, update, requester)

    async def list_updates(self, booking_id: UUID, requester: User) -> list[BookingUpdate]:
        """Activity for a booking; owners only see public records."""
        booking = await self.get(booking_id, requester)
        return await self.store.list_updates(booking.id, public_only=not requester.is_admin)

    async def lookup_by_reference(self, reference_number: str | None, phone_number: str | None) -> Booking:
        """Public status lookup.

        Both values must match the stored booking exactly; any mismatch is
        reported as not found so the response does not reveal which one.
        """
        errors = []
        if not reference_number or not reference_number.strip():
            errors.append({"field": "referenceNumber", "message": "Reference number is required"})
        if not phone_number or not phone_number.strip():
            errors.append({"field": "phoneNumber", "message": "Phone number is required"})
        if errors:
            raise ValidationError("Reference number and phone number are required", errors=errors)

        booking = await self.store.get_booking_by_reference(reference_number)
        if not booking or booking.phone_number != phone_number:
            raise NotFoundError("Booking")
        return booking

    # ==================== ADMIN ====================

    async def list_all(
        self,
        requester: User,
        status: BookingStatus | str | None = None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
    ) -> list[Booking]:
        """All bookings, latest appointment first."""
        self._require_admin(requester)
        criteria = BookingFilter(
            status=BookingStatus(status).value if status else None,
            from_date=_as_utc(from_date),
            to_date=_as_utc(to_date),
            order_by="preferred_date",
        )
        return await self.store.list_bookings(criteria)

    async def update_status(
        self,
        booking_id: UUID,
        payload: BookingStatusUpdate | Mapping[str, Any],
        requester: User,
    ) -> BookingChange:
        """Admin update of status and repair details."""
        self._require_admin(requester)
        data = validate_booking_update(payload)
        booking = await self._get_booking(booking_id)
        return await self._apply_update(booking, data, requester)

    async def delete(self, booking_id: UUID, requester: User) -> None:
        """Hard-delete a booking and its activity."""
        self._require_admin(requester)
        booking = await self._get_booking(booking_id)
        await self.store.delete_booking(booking)
        logger.info(f"Booking {booking.reference_number} deleted by {requester.id}")

    async def send_custom_notification(
        self,
        booking_id: UUID,
        message: str,
        requester: User,
    ) -> CustomNotification:
        """Send a free-text SMS to the booking's phone number."""
        self._require_admin(requester)
        if not message or not message.strip():
            raise ValidationError(
                "Message is required",
                errors=[{"field": "message", "message": "Message is required"}],
            )

        booking = await self._get_booking(booking_id)
        if not booking.phone_number:
            raise ValidationError(
                "Booking has no phone number",
                errors=[{"field": "phoneNumber", "message": "Booking has no phone number"}],
            )

        result = await self.notifier.send_sms(booking.phone_number, message)
        update = await self._record(booking, UpdateType.NOTIFICATION, message, requester.id)
        return CustomNotification(update=update, notification=result)

    async def add_comment(
        self,
        booking_id: UUID,
        payload: CommentCreate | Mapping[str, Any],
        requester: User,
    ) -> BookingUpdate:
        """Append an admin activity record."""
        self._require_admin(requester)
        if not isinstance(payload, CommentCreate):
            payload = CommentCreate.model_validate(payload)

        booking = await self._get_booking(booking_id)
        return await self._record(
            booking,
            payload.type,
            payload.content,
            requester.id,
            is_public=payload.is_public,
        )

    async def stats(self, requester: User) -> dict[str, Any]:
        """Booking counts per status and revenue from completed work."""
        self._require_admin(requester)
        bookings = await self.store.list_bookings()

        by_status = {s.value: 0 for s in BookingStatus}
        revenue = 0.0
        for booking in bookings:
            by_status[booking.status] = by_status.get(booking.status, 0) + 1
            if booking.status == BookingStatus.COMPLETED.value and booking.total_price:
                revenue += float(booking.total_price)

        return {
            "total": len(bookings),
            "by_status": by_status,
            "completed_revenue": round(revenue, 2),
        }

    # ==================== SCHEDULED ====================

    async def send_appointment_reminders(self, day: date) -> int:
        """Remind opted-in customers with a CONFIRMED appointment on ``day``.

        ``day`` is a calendar date in the shop's timezone.

        Returns:
            int: Number of reminders delivered
        """
        shop_tz = ZoneInfo(self.settings.timezone)
        start = datetime.combine(day, time.min, tzinfo=shop_tz).astimezone(UTC)
        end = start + timedelta(days=1) - timedelta(microseconds=1)

        bookings = await self.store.list_bookings(
            BookingFilter(
                status=BookingStatus.CONFIRMED.value,
                from_date=start,
                to_date=end,
                order_by="preferred_date",
                descending=False,
            )
        )

        sent = 0
        for booking in bookings:
            if not booking.sms_opt_in or not booking.phone_number:
                continue
            message = build_reminder_message(booking)
            result = await self.notifier.send_sms(booking.phone_number, message)
            if result.sent:
                await self._record(booking, UpdateType.NOTIFICATION, message, SYSTEM_ACTOR)
                sent += 1

        logger.info(f"Sent {sent} appointment reminders for {day.isoformat()}")
        return sent

    # ==================== HELPERS ====================

    def _require_admin(self, requester: User) -> None:
        if not requester.is_admin:
            raise ForbiddenError("Admin access required")

    async def _get_booking(self, booking_id: UUID) -> Booking:
        booking = await self.store.get_booking(booking_id)
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        return booking

    async def _record(
        self,
        booking: Booking,
        update_type: UpdateType,
        content: str,
        created_by: str,
        is_public: bool = True,
        old_status: str | None = None,
        new_status: str | None = None,
    ) -> BookingUpdate:
        update = BookingUpdate(
            booking_id=booking.id,
            type=UpdateType(update_type).value,
            content=content,
            old_status=old_status,
            new_status=new_status,
            created_by=created_by,
            is_public=is_public,
        )
        return await self.store.add_update(update)

    async def _apply_update(
        self,
        booking: Booking,
        data: BookingStatusUpdate,
        requester: User,
    ) -> BookingChange:
        changes = data.model_dump(exclude_unset=True)
        new_status = changes.pop("status", None)
        reason = (changes.pop("reason", None) or "").strip()

        previous_status = booking.status
        status_changed = new_status is not None and new_status.value != previous_status
        if status_changed:
            assert_booking_transition(
                previous_status,
                new_status,
                strict=self.settings.strict_status_transitions,
            )

        old_price = (booking.total_price, booking.labor_hours)
        old_diagnosis = (booking.diagnosis, booking.parts_needed)

        for field, value in changes.items():
            if value is None:
                if field in _TEXT_FIELDS:
                    value = ""
                elif field in ("phone_number", "preferred_date", "sms_opt_in"):
                    continue
            setattr(booking, field, value)

        if status_changed:
            booking.status = new_status.value
            if reason:
                note = f"[Status changed to {new_status.value}] {reason}"
                booking.notes = f"{booking.notes}\n{note}" if booking.notes else note

        await self.store.save_booking(booking)

        if status_changed:
            await self._record(
                booking,
                UpdateType.STATUS_CHANGE,
                f"Status changed from {previous_status} to {new_status.value}",
                requester.id,
                old_status=previous_status,
                new_status=new_status.value,
            )
            logger.info(
                f"Booking {booking.reference_number}: {previous_status} -> {new_status.value} "
                f"by {requester.id}"
            )

        if (booking.total_price, booking.labor_hours) != old_price:
            await self._record(
                booking,
                UpdateType.PRICE_UPDATE,
                _describe_price(booking),
                requester.id,
                is_public=False,
            )

        if (booking.diagnosis, booking.parts_needed) != old_diagnosis:
            await self._record(
                booking,
                UpdateType.DIAGNOSIS,
                _describe_diagnosis(booking),
                requester.id,
                is_public=False,
            )

        notification = None
        if status_changed:
            notification = await self.notifier.notify_status_change(booking, reason or None)

        return BookingChange(booking=booking, notification=notification)


def _describe_price(booking: Booking) -> str:
    parts = []
    if booking.total_price is not None:
        parts.append(f"Total price: ${booking.total_price:.2f}")
    if booking.labor_hours is not None:
        parts.append(f"Labor hours: {booking.labor_hours:g}")
    return "; ".join(parts) or "Estimate cleared"


def _describe_diagnosis(booking: Booking) -> str:
    parts = []
    if booking.diagnosis:
        parts.append(f"Diagnosis: {booking.diagnosis}")
    if booking.parts_needed:
        parts.append(f"Parts needed: {booking.parts_needed}")
    return "; ".join(parts) or "Diagnosis cleared"


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
