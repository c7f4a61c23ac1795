"""Storage contract for the booking core.

Services depend on this interface only; the SQLAlchemy and in-memory stores
both implement it. Records are the ORM model instances. A booking returned by
any read method has its ``car`` attribute populated.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from repairshop.models.booking import Booking, BookingUpdate
from repairshop.models.car import Car
from repairshop.models.user import User


@dataclass
class BookingFilter:
    """Criteria for listing bookings."""

    user_id: str | None = None
    status: str | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
    order_by: str = "created_at"  # created_at | preferred_date
    descending: bool = True


class RepairShopStore(ABC):
    """Abstract base class for booking storage."""

    # ==================== USERS ====================

    @abstractmethod
    async def get_user(self, user_id: str) -> User | None:
        pass

    @abstractmethod
    async def add_user(self, user: User) -> User:
        pass

    @abstractmethod
    async def save_user(self, user: User) -> User:
        pass

    # ==================== VEHICLES ====================

    @abstractmethod
    async def get_car(self, car_id: UUID) -> Car | None:
        pass

    @abstractmethod
    async def list_cars(self, user_id: str | None = None) -> list[Car]:
        """List cars, newest first, optionally for one owner."""
        pass

    @abstractmethod
    async def add_car(self, car: Car) -> Car:
        pass

    @abstractmethod
    async def save_car(self, car: Car) -> Car:
        pass

    @abstractmethod
    async def delete_car(self, car: Car) -> None:
        pass

    @abstractmethod
    async def count_bookings_for_car(self, car_id: UUID) -> int:
        pass

    # ==================== BOOKINGS ====================

    @abstractmethod
    async def get_booking(self, booking_id: UUID) -> Booking | None:
        pass

    @abstractmethod
    async def get_booking_by_reference(self, reference_number: str) -> Booking | None:
        pass

    @abstractmethod
    async def reference_exists(self, reference_number: str) -> bool:
        pass

    @abstractmethod
    async def list_bookings(self, criteria: BookingFilter | None = None) -> list[Booking]:
        pass

    @abstractmethod
    async def add_booking(self, booking: Booking) -> Booking:
        pass

    @abstractmethod
    async def save_booking(self, booking: Booking) -> Booking:
        pass

    @abstractmethod
    async def delete_booking(self, booking: Booking) -> None:
        """Delete a booking together with its activity records."""
        pass

    # ==================== ACTIVITY ====================

    @abstractmethod
    async def add_update(self, update: BookingUpdate) -> BookingUpdate:
        pass

    @abstractmethod
    async def list_updates(self, booking_id: UUID, public_only: bool = False) -> list[BookingUpdate]:
        """Activity records for a booking, oldest first."""
        pass
