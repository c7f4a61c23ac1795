"""Demo data for the development server.

Creates a customer with two cars and a handful of bookings in different
states, plus an admin. The user ids match the development test tokens so the
data is visible right after signing in with them.
"""

import logging
from datetime import timedelta

from repairshop.core.identity import DEV_ADMIN_IDENTITY, DEV_TEST_IDENTITY
from repairshop.domain.booking_state import BookingStatus, UpdateType
from repairshop.models.booking import Booking, BookingUpdate
from repairshop.models.car import Car
from repairshop.models.user import User, utcnow
from repairshop.repositories.base import RepairShopStore

logger = logging.getLogger(__name__)

DEMO_PHONE = "555-123-4567"

DEMO_CARS = [
    {"make": "Toyota", "model": "Camry", "year": 2020, "license_plate": "ABC123", "mileage": 15000},
    {"make": "Honda", "model": "Civic", "year": 2019, "license_plate": "XYZ789", "mileage": 20000},
]

# (car index, days from today, status, issue, notes, price, diagnosis, parts, labor hours)
DEMO_BOOKINGS = [
    (0, 0, BookingStatus.PENDING, "Oil change and tire rotation", "", None, "", "", None),
    (
        0, -30, BookingStatus.COMPLETED, "Check engine light is on",
        "Customer reported occasional stalling", 350.75,
        "Faulty oxygen sensor causing improper fuel mixture", "Oxygen sensor, gasket", 2.5,
    ),
    (
        1, -90, BookingStatus.COMPLETED, "Brake pads replacement and fluid check",
        "Customer mentioned squeaking noise when braking", 275.50,
        "Worn brake pads and low brake fluid", "Front and rear brake pads, brake fluid", 3.0,
    ),
    (
        0, -15, BookingStatus.IN_PROGRESS, "Air conditioning not cooling properly",
        "AC blows warm air even on max setting", 420.00,
        "AC compressor failing and refrigerant leak detected", "AC compressor, refrigerant, seals", 4.0,
    ),
    (
        1, -45, BookingStatus.COMPLETED, "Regular maintenance - 30,000 mile service",
        "Full service including oil change, filter replacement, and inspection", 189.99,
        "Regular maintenance completed, all systems normal", "Oil filter, air filter, cabin filter, oil", 1.5,
    ),
]


async def seed_demo_data(store: RepairShopStore) -> bool:
    """Insert the demo records unless the demo customer already exists.

    Returns:
        bool: True when data was inserted
    """
    if await store.get_user(DEV_TEST_IDENTITY.uid):
        return False

    customer = await store.add_user(
        User(
            id=DEV_TEST_IDENTITY.uid,
            email=DEV_TEST_IDENTITY.email,
            name=DEV_TEST_IDENTITY.name,
            is_admin=False,
        )
    )
    if not await store.get_user(DEV_ADMIN_IDENTITY.uid):
        await store.add_user(
            User(
                id=DEV_ADMIN_IDENTITY.uid,
                email=DEV_ADMIN_IDENTITY.email,
                name=DEV_ADMIN_IDENTITY.name,
                is_admin=True,
            )
        )

    cars = []
    for values in DEMO_CARS:
        cars.append(await store.add_car(Car(user_id=customer.id, **values)))

    now = utcnow()
    for index, (car_index, days, status, issue, notes, price, diagnosis, parts, labor) in enumerate(
        DEMO_BOOKINGS, start=1
    ):
        car = cars[car_index]
        preferred = now + timedelta(days=days)
        booking = Booking(
            reference_number=f"REP-DEMO{index}",
            car_id=car.id,
            user_id=customer.id,
            issue_desc=issue,
            preferred_date=preferred,
            status=status.value,
            phone_number=DEMO_PHONE,
            email=customer.email,
            first_name="Demo",
            last_name="Customer",
            sms_opt_in=True,
            notes=notes,
            diagnosis=diagnosis,
            parts_needed=parts,
            labor_hours=labor,
            total_price=price,
            estimated_completion_date=preferred + timedelta(days=2) if price else None,
        )
        booking.car = car
        await store.add_booking(booking)
        await store.add_update(
            BookingUpdate(
                booking_id=booking.id,
                type=UpdateType.SYSTEM.value,
                content="Booking created",
                created_by="system",
                is_public=True,
            )
        )

    logger.info(f"Seeded demo data: {len(cars)} cars, {len(DEMO_BOOKINGS)} bookings")
    return True
