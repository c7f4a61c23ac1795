"""Storage backends for users, vehicles and bookings."""

from repairshop.repositories.base import BookingFilter, RepairShopStore
from repairshop.repositories.memory import InMemoryStore, memory_store
from repairshop.repositories.sql import SQLAlchemyStore

__all__ = [
    "BookingFilter",
    "RepairShopStore",
    "InMemoryStore",
    "SQLAlchemyStore",
    "memory_store",
]
