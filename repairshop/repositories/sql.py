"""SQLAlchemy implementation of the booking store."""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from repairshop.models.booking import Booking, BookingUpdate
from repairshop.models.car import Car
from repairshop.models.user import User
from repairshop.repositories.base import BookingFilter, RepairShopStore


class SQLAlchemyStore(RepairShopStore):
    """Store backed by a request-scoped ``AsyncSession``.

    Writes are flushed immediately; committing is left to the session owner.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ==================== USERS ====================

    async def get_user(self, user_id: str) -> User | None:
        return await self.db.get(User, user_id)

    async def add_user(self, user: User) -> User:
        self.db.add(user)
        await self.db.flush()
        return user

    async def save_user(self, user: User) -> User:
        await self.db.flush()
        return user

    # ==================== VEHICLES ====================

    async def get_car(self, car_id: UUID) -> Car | None:
        return await self.db.get(Car, car_id)

    async def list_cars(self, user_id: str | None = None) -> list[Car]:
        query = select(Car)
        if user_id is not None:
            query = query.where(Car.user_id == user_id)
        result = await self.db.execute(query.order_by(Car.created_at.desc()))
        return list(result.scalars().all())

    async def add_car(self, car: Car) -> Car:
        self.db.add(car)
        await self.db.flush()
        return car

    async def save_car(self, car: Car) -> Car:
        await self.db.flush()
        return car

    async def delete_car(self, car: Car) -> None:
        await self.db.delete(car)
        await self.db.flush()

    async def count_bookings_for_car(self, car_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Booking).where(Booking.car_id == car_id)
        )
        return result.scalar_one()

    # ==================== BOOKINGS ====================

    async def get_booking(self, booking_id: UUID) -> Booking | None:
        result = await self.db.execute(
            select(Booking).options(selectinload(Booking.car)).where(Booking.id == booking_id)
        )
        return result.scalar_one_or_none()

    async def get_booking_by_reference(self, reference_number: str) -> Booking | None:
        result = await self.db.execute(
            select(Booking)
            .options(selectinload(Booking.car))
            .where(Booking.reference_number == reference_number)
        )
        return result.scalar_one_or_none()

    async def reference_exists(self, reference_number: str) -> bool:
        result = await self.db.execute(
            select(Booking.id).where(Booking.reference_number == reference_number).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def list_bookings(self, criteria: BookingFilter | None = None) -> list[Booking]:
        criteria = criteria or BookingFilter()
        query = select(Booking).options(selectinload(Booking.car))

        if criteria.user_id is not None:
            query = query.where(Booking.user_id == criteria.user_id)
        if criteria.status:
            query = query.where(Booking.status == criteria.status)
        if criteria.from_date:
            query = query.where(Booking.preferred_date >= criteria.from_date)
        if criteria.to_date:
            query = query.where(Booking.preferred_date <= criteria.to_date)

        order_column = getattr(Booking, criteria.order_by)
        query = query.order_by(order_column.desc() if criteria.descending else order_column.asc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def add_booking(self, booking: Booking) -> Booking:
        self.db.add(booking)
        await self.db.flush()
        return booking

    async def save_booking(self, booking: Booking) -> Booking:
        await self.db.flush()
        return booking

    async def delete_booking(self, booking: Booking) -> None:
        await self.db.execute(delete(BookingUpdate).where(BookingUpdate.booking_id == booking.id))
        await self.db.delete(booking)
        await self.db.flush()

    # ==================== ACTIVITY ====================

    async def add_update(self, update: BookingUpdate) -> BookingUpdate:
        self.db.add(update)
        await self.db.flush()
        return update

    async def list_updates(self, booking_id: UUID, public_only: bool = False) -> list[BookingUpdate]:
        query = select(BookingUpdate).where(BookingUpdate.booking_id == booking_id)
        if public_only:
            query = query.where(BookingUpdate.is_public.is_(True))
        result = await self.db.execute(query.order_by(BookingUpdate.created_at.asc()))
        return list(result.scalars().all())
