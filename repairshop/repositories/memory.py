"""In-memory implementation of the booking store.

Used by the development server (``STORAGE_BACKEND=memory``) and by tests.
Records live in process dictionaries and vanish on restart.
"""

import uuid
from uuid import UUID

from repairshop.models.booking import Booking, BookingUpdate
from repairshop.models.car import Car
from repairshop.models.user import User, utcnow
from repairshop.repositories.base import BookingFilter, RepairShopStore


def _stamp(record) -> None:
    now = utcnow()
    if getattr(record, "id", None) is None:
        record.id = uuid.uuid4()
    if record.created_at is None:
        record.created_at = now
    if hasattr(record, "updated_at"):
        record.updated_at = now


class InMemoryStore(RepairShopStore):
    """Dictionary-backed store with the same contract as the SQL store."""

    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.cars: dict[UUID, Car] = {}
        self.bookings: dict[UUID, Booking] = {}
        self.updates: list[BookingUpdate] = []

    def _attach_car(self, booking: Booking) -> Booking:
        booking.car = self.cars.get(booking.car_id)
        return booking

    # ==================== USERS ====================

    async def get_user(self, user_id: str) -> User | None:
        return self.users.get(user_id)

    async def add_user(self, user: User) -> User:
        now = utcnow()
        user.created_at = user.created_at or now
        user.updated_at = now
        self.users[user.id] = user
        return user

    async def save_user(self, user: User) -> User:
        user.updated_at = utcnow()
        self.users[user.id] = user
        return user

    # ==================== VEHICLES ====================

    async def get_car(self, car_id: UUID) -> Car | None:
        return self.cars.get(car_id)

    async def list_cars(self, user_id: str | None = None) -> list[Car]:
        cars = [c for c in self.cars.values() if user_id is None or c.user_id == user_id]
        return sorted(cars, key=lambda c: c.created_at, reverse=True)

    async def add_car(self, car: Car) -> Car:
        _stamp(car)
        self.cars[car.id] = car
        return car

    async def save_car(self, car: Car) -> Car:
        car.updated_at = utcnow()
        self.cars[car.id] = car
        return car

    async def delete_car(self, car: Car) -> None:
        self.cars.pop(car.id, None)

    async def count_bookings_for_car(self, car_id: UUID) -> int:
        return sum(1 for b in self.bookings.values() if b.car_id == car_id)

    # ==================== BOOKINGS ====================

    async def get_booking(self, booking_id: UUID) -> Booking | None:
        booking = self.bookings.get(booking_id)
        return self._attach_car(booking) if booking else None

    async def get_booking_by_reference(self, reference_number: str) -> Booking | None:
        for booking in self.bookings.values():
            if booking.reference_number == reference_number:
                return self._attach_car(booking)
        return None

    async def reference_exists(self, reference_number: str) -> bool:
        return any(b.reference_number == reference_number for b in self.bookings.values())

    async def list_bookings(self, criteria: BookingFilter | None = None) -> list[Booking]:
        criteria = criteria or BookingFilter()
        results = []
        for booking in self.bookings.values():
            if criteria.user_id is not None and booking.user_id != criteria.user_id:
                continue
            if criteria.status and booking.status != criteria.status:
                continue
            if criteria.from_date and booking.preferred_date < criteria.from_date:
                continue
            if criteria.to_date and booking.preferred_date > criteria.to_date:
                continue
            results.append(self._attach_car(booking))

        return sorted(
            results,
            key=lambda b: getattr(b, criteria.order_by),
            reverse=criteria.descending,
        )

    async def add_booking(self, booking: Booking) -> Booking:
        _stamp(booking)
        self.bookings[booking.id] = booking
        return self._attach_car(booking)

    async def save_booking(self, booking: Booking) -> Booking:
        booking.updated_at = utcnow()
        self.bookings[booking.id] = booking
        return self._attach_car(booking)

    async def delete_booking(self, booking: Booking) -> None:
        self.bookings.pop(booking.id, None)
        self.updates = [u for u in self.updates if u.booking_id != booking.id]

    # ==================== ACTIVITY ====================

    async def add_update(self, update: BookingUpdate) -> BookingUpdate:
        _stamp(update)
        self.updates.append(update)
        return update

    async def list_updates(self, booking_id: UUID, public_only: bool = False) -> list[BookingUpdate]:
        updates = [
            u for u in self.updates
            if u.booking_id == booking_id and (u.is_public or not public_only)
        ]
        return sorted(updates, key=lambda u: u.created_at)


# Process-wide store for the development server
memory_store = InMemoryStore()
