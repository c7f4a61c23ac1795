"""Booking lifecycle service tests."""

import re
from datetime import UTC, date, datetime
from uuid import uuid4

import pytest

from repairshop.core.exceptions import (
    ForbiddenError,
    InvalidBookingStatus,
    NotFoundError,
    ValidationError,
)
from repairshop.domain.booking_state import BookingStatus, UpdateType
from repairshop.services.booking_service import BookingService
from repairshop.services.notification_service import NotificationService

from conftest import RecordingGateway

REFERENCE_PATTERN = re.compile(r"^[A-Z]+-[A-Z0-9]{5}$")


async def test_create_booking_is_pending_with_reference(service, store, customer, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    assert booking.status == BookingStatus.PENDING.value
    assert REFERENCE_PATTERN.match(booking.reference_number)
    assert booking.car is car
    assert booking.issue_desc == "Oil change"
    assert booking.preferred_date == datetime(2030, 5, 1, 9, 0, tzinfo=UTC)
    assert booking.notes == ""

    updates = await store.list_updates(booking.id)
    assert [(u.type, u.content) for u in updates] == [(UpdateType.SYSTEM.value, "Booking created")]


async def test_create_booking_sends_no_sms_by_default(service, gateway, customer, car, booking_payload):
    await service.create(booking_payload(car.id), customer)

    assert gateway.sent == []


async def test_create_booking_references_are_unique(service, customer, car, booking_payload):
    first = await service.create(booking_payload(car.id), customer)
    second = await service.create(booking_payload(car.id), customer)

    assert first.reference_number != second.reference_number


async def test_create_booking_for_someone_elses_car_is_forbidden(
    service, store, other_customer, car, booking_payload
):
    with pytest.raises(ForbiddenError):
        await service.create(booking_payload(car.id), other_customer)

    assert store.bookings == {}
    assert store.updates == []


async def test_create_booking_for_unknown_car(service, customer, booking_payload):
    with pytest.raises(NotFoundError):
        await service.create(booking_payload(uuid4()), customer)


async def test_create_booking_rejects_short_issue(service, customer, car, booking_payload):
    with pytest.raises(ValidationError) as exc_info:
        await service.create(booking_payload(car.id, issueDesc="  hi "), customer)

    assert exc_info.value.errors == [
        {"field": "issueDesc", "message": "Issue description is required (min 5 characters)"}
    ]


async def test_get_booking_owner_or_admin_only(service, customer, other_customer, admin, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    assert (await service.get(booking.id, customer)).id == booking.id
    assert (await service.get(booking.id, admin)).id == booking.id
    with pytest.raises(ForbiddenError):
        await service.get(booking.id, other_customer)
    with pytest.raises(NotFoundError):
        await service.get(uuid4(), admin)


async def test_confirm_sends_template_and_records_status_change(
    service, store, gateway, customer, admin, car, booking_payload
):
    booking = await service.create(booking_payload(car.id, phoneNumber="555-0100"), customer)

    change = await service.update_status(booking.id, {"status": "CONFIRMED"}, admin)

    assert change.booking.status == "CONFIRMED"
    assert gateway.sent == [("555-0100", "Your booking has been confirmed.")]
    assert change.notification.sent is True
    assert change.notification.message_id == "SM0001"

    status_changes = [u for u in await store.list_updates(booking.id) if u.type == "STATUS_CHANGE"]
    assert len(status_changes) == 1
    record = status_changes[0]
    assert record.content == "Status changed from PENDING to CONFIRMED"
    assert (record.old_status, record.new_status) == ("PENDING", "CONFIRMED")
    assert record.created_by == admin.id
    assert record.is_public is True


async def test_same_status_is_not_a_change(service, store, gateway, customer, admin, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    change = await service.update_status(booking.id, {"status": "PENDING"}, admin)

    assert change.notification is None
    assert gateway.sent == []
    assert not [u for u in await store.list_updates(booking.id) if u.type == "STATUS_CHANGE"]


async def test_no_sms_without_opt_in(service, gateway, customer, admin, car, booking_payload):
    booking = await service.create(booking_payload(car.id, smsOptIn=False), customer)

    change = await service.update_status(booking.id, {"status": "CONFIRMED"}, admin)

    assert change.booking.status == "CONFIRMED"
    assert change.notification is None
    assert gateway.sent == []


async def test_reason_goes_to_sms_and_notes(service, gateway, customer, admin, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    change = await service.update_status(
        booking.id, {"status": "CONFIRMED", "reason": "Bring the spare key"}, admin
    )

    assert gateway.sent[0][1] == "Your booking has been confirmed. Note: Bring the spare key"
    assert change.booking.notes == "[Status changed to CONFIRMED] Bring the spare key"

    await service.update_status(booking.id, {"status": "IN_PROGRESS", "reason": "Parts arrived"}, admin)
    assert change.booking.notes == (
        "[Status changed to CONFIRMED] Bring the spare key\n"
        "[Status changed to IN_PROGRESS] Parts arrived"
    )


async def test_repair_details_are_merged_and_audited(service, store, customer, admin, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    change = await service.update_status(
        booking.id,
        {
            "totalPrice": 350.75,
            "laborHours": 2.5,
            "diagnosis": "Faulty oxygen sensor",
            "partsNeeded": "Oxygen sensor",
        },
        admin,
    )

    assert change.booking.status == "PENDING"
    assert change.booking.total_price == 350.75
    assert change.booking.labor_hours == 2.5
    assert change.notification is None

    updates = {u.type: u for u in await store.list_updates(booking.id)}
    assert updates["PRICE_UPDATE"].content == "Total price: $350.75; Labor hours: 2.5"
    assert updates["PRICE_UPDATE"].is_public is False
    assert updates["DIAGNOSIS"].content == "Diagnosis: Faulty oxygen sensor; Parts needed: Oxygen sensor"
    assert updates["DIAGNOSIS"].is_public is False


async def test_update_status_rejects_negative_price(service, customer, admin, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    with pytest.raises(ValidationError) as exc_info:
        await service.update_status(booking.id, {"totalPrice": -1}, admin)

    assert exc_info.value.errors[0]["field"] == "totalPrice"


async def test_update_status_is_admin_only(service, customer, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    with pytest.raises(ForbiddenError):
        await service.update_status(booking.id, {"status": "CONFIRMED"}, customer)


@pytest.mark.parametrize("terminal", ["CANCELLED", "COMPLETED"])
async def test_terminal_status_cannot_change(service, store, customer, admin, car, booking_payload, terminal):
    booking = await service.create(booking_payload(car.id), customer)
    for status in ("CONFIRMED", "IN_PROGRESS", "COMPLETED") if terminal == "COMPLETED" else ("CANCELLED",):
        await service.update_status(booking.id, {"status": status}, admin)

    with pytest.raises(InvalidBookingStatus):
        await service.update_status(booking.id, {"status": "CONFIRMED"}, admin)

    assert (await store.get_booking(booking.id)).status == terminal


async def test_strict_transitions_reject_skipping(service, customer, admin, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    with pytest.raises(InvalidBookingStatus):
        await service.update_status(booking.id, {"status": "COMPLETED"}, admin)


async def test_relaxed_transitions_allow_skipping(store, notifier, customer, admin, car, booking_payload):
    from repairshop.config import Settings

    relaxed = BookingService(store, notifier, settings=Settings(strict_status_transitions=False))
    booking = await relaxed.create(booking_payload(car.id), customer)

    change = await relaxed.update_status(booking.id, {"status": "IN_PROGRESS"}, admin)

    assert change.booking.status == "IN_PROGRESS"


async def test_issue_minimum_follows_service_settings(store, notifier, customer, car, booking_payload):
    from repairshop.config import Settings
    from repairshop.schemas.booking import BookingCreate

    service = BookingService(store, notifier, settings=Settings(issue_description_min_length=10))

    for payload in (
        booking_payload(car.id, issueDesc="Brake"),
        BookingCreate.model_validate(booking_payload(car.id, issueDesc="Brake")),
    ):
        with pytest.raises(ValidationError) as exc_info:
            await service.create(payload, customer)
        assert exc_info.value.errors == [
            {"field": "issueDesc", "message": "Issue description is required (min 10 characters)"}
        ]

    booking = await service.create(booking_payload(car.id, issueDesc="Brakes grind"), customer)
    assert booking.issue_desc == "Brakes grind"


async def test_sms_failure_does_not_undo_update(store, customer, admin, car, booking_payload):
    service = BookingService(store, NotificationService(gateway=RecordingGateway(fail=True)))
    booking = await service.create(booking_payload(car.id), customer)

    change = await service.update_status(booking.id, {"status": "CONFIRMED"}, admin)

    assert change.notification.sent is False
    assert "carrier rejected" in change.notification.error
    assert (await store.get_booking(booking.id)).status == "CONFIRMED"
    assert [u.type for u in await store.list_updates(booking.id)] == ["SYSTEM", "STATUS_CHANGE"]


async def test_owner_can_cancel(service, gateway, customer, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    change = await service.cancel(booking.id, customer)

    assert change.booking.status == "CANCELLED"
    assert gateway.sent == [("555-0100", "Your booking has been cancelled.")]


async def test_only_owner_can_cancel(service, other_customer, admin, customer, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    with pytest.raises(ForbiddenError):
        await service.cancel(booking.id, other_customer)
    with pytest.raises(ForbiddenError):
        await service.cancel(booking.id, admin)


async def test_lookup_by_reference_requires_exact_match(service, customer, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    found = await service.lookup_by_reference(booking.reference_number, "555-0100")
    assert found.id == booking.id

    with pytest.raises(NotFoundError):
        await service.lookup_by_reference(booking.reference_number, "555-0101")
    with pytest.raises(NotFoundError):
        await service.lookup_by_reference(booking.reference_number.lower(), "555-0100")
    with pytest.raises(NotFoundError):
        await service.lookup_by_reference("BK-9999", "555-0000")


async def test_lookup_requires_both_values(service):
    with pytest.raises(ValidationError) as exc_info:
        await service.lookup_by_reference("REP-AB123", "")

    assert exc_info.value.errors == [{"field": "phoneNumber", "message": "Phone number is required"}]


async def test_custom_notification(service, store, gateway, customer, admin, car, booking_payload):
    booking = await service.create(booking_payload(car.id, smsOptIn=False), customer)

    result = await service.send_custom_notification(booking.id, "Your car is ready early!", admin)

    assert gateway.sent == [("555-0100", "Your car is ready early!")]
    assert result.notification.sent is True
    assert result.update.type == "NOTIFICATION"
    assert result.update.content == "Your car is ready early!"


async def test_custom_notification_rejects_blank_message(service, gateway, customer, admin, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    with pytest.raises(ValidationError):
        await service.send_custom_notification(booking.id, "   ", admin)
    assert gateway.sent == []


async def test_comments_and_visibility(service, customer, admin, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    await service.add_comment(booking.id, {"content": "Internal: check warranty"}, admin)
    await service.add_comment(booking.id, {"content": "We will call you", "isPublic": True}, admin)

    admin_view = [u.content for u in await service.list_updates(booking.id, admin)]
    owner_view = [u.content for u in await service.list_updates(booking.id, customer)]

    assert admin_view == ["Booking created", "Internal: check warranty", "We will call you"]
    assert owner_view == ["Booking created", "We will call you"]


async def test_list_mine_and_list_all(service, customer, other_customer, admin, car, store, booking_payload):
    from repairshop.models.car import Car

    other_car = await store.add_car(
        Car(user_id=other_customer.id, make="Honda", model="Civic", year=2019, license_plate="XYZ789")
    )
    mine = await service.create(booking_payload(car.id, preferredDate="2030-05-01T09:00:00Z"), customer)
    theirs = await service.create(
        booking_payload(other_car.id, preferredDate="2030-06-01T09:00:00Z"), other_customer
    )

    assert [b.id for b in await service.list_mine(customer)] == [mine.id]
    assert [b.id for b in await service.list_all(admin)] == [theirs.id, mine.id]
    assert [b.id for b in await service.list_all(admin, from_date=datetime(2030, 5, 15, tzinfo=UTC))] == [theirs.id]
    assert await service.list_all(admin, status="CONFIRMED") == []

    with pytest.raises(ForbiddenError):
        await service.list_all(customer)


async def test_delete_removes_activity(service, store, customer, admin, car, booking_payload):
    booking = await service.create(booking_payload(car.id), customer)

    await service.delete(booking.id, admin)

    assert await store.get_booking(booking.id) is None
    assert await store.list_updates(booking.id) == []


async def test_stats(service, customer, admin, car, booking_payload):
    first = await service.create(booking_payload(car.id), customer)
    await service.create(booking_payload(car.id), customer)
    for status in ("CONFIRMED", "IN_PROGRESS"):
        await service.update_status(first.id, {"status": status}, admin)
    await service.update_status(first.id, {"status": "COMPLETED", "totalPrice": 189.99}, admin)

    stats = await service.stats(admin)

    assert stats["total"] == 2
    assert stats["by_status"]["COMPLETED"] == 1
    assert stats["by_status"]["PENDING"] == 1
    assert stats["completed_revenue"] == 189.99


async def test_appointment_reminders(service, store, gateway, customer, admin, car, booking_payload):
    # 14:00 UTC on 2030-05-01 is 10:00 in New York
    today = await service.create(booking_payload(car.id, preferredDate="2030-05-01T14:00:00Z"), customer)
    await service.update_status(today.id, {"status": "CONFIRMED"}, admin)
    pending = await service.create(booking_payload(car.id, preferredDate="2030-05-01T15:00:00Z"), customer)
    later = await service.create(booking_payload(car.id, preferredDate="2030-05-03T14:00:00Z"), customer)
    await service.update_status(later.id, {"status": "CONFIRMED"}, admin)
    gateway.sent.clear()

    sent = await service.send_appointment_reminders(date(2030, 5, 1))

    assert sent == 1
    assert gateway.sent == [
        (
            "555-0100",
            f"Reminder: your repair appointment ({today.reference_number}) "
            "is scheduled for Wed, May 01 at 10:00 AM.",
        )
    ]
    assert [u.type for u in await store.list_updates(today.id)][-1] == "NOTIFICATION"
    assert [u.type for u in await store.list_updates(pending.id)] == ["SYSTEM"]
