"""Database models."""

from repairshop.models.booking import Booking, BookingUpdate
from repairshop.models.car import Car
from repairshop.models.user import User

__all__ = [
    # User
    "User",
    # Vehicle
    "Car",
    # Booking
    "Booking",
    "BookingUpdate",
]
