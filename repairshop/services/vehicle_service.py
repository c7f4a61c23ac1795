"""Vehicle service: customer garage and admin vehicle management."""

import logging
from uuid import UUID

from repairshop.core.exceptions import ForbiddenError, NotFoundError, VehicleInUseError
from repairshop.models.car import Car
from repairshop.models.user import User
from repairshop.repositories.base import RepairShopStore
from repairshop.schemas.car import AdminCarCreate, AdminCarUpdate, CarBase, CarCreate, CarUpdate

logger = logging.getLogger(__name__)

# Fields replaced on update
CAR_FIELDS = ("make", "model", "year", "license_plate", "mileage", "vin", "color")


class VehicleService:
    """Service for vehicle CRUD with ownership checks."""

    def __init__(self, store: RepairShopStore) -> None:
        self.store = store

    # ==================== CUSTOMER ====================

    async def list_own(self, requester: User) -> list[Car]:
        return await self.store.list_cars(user_id=requester.id)

    async def get_own(self, car_id: UUID, requester: User) -> tuple[Car, int]:
        """Get one of the requester's cars with its bookings count."""
        car = await self._get_owned(car_id, requester)
        return car, await self.store.count_bookings_for_car(car.id)

    async def create(self, data: CarCreate, requester: User) -> Car:
        car = Car(user_id=requester.id, **_car_values(data))
        await self.store.add_car(car)
        logger.info(f"Car {car.id} registered by {requester.id}")
        return car

    async def update(self, car_id: UUID, data: CarUpdate, requester: User) -> Car:
        car = await self._get_owned(car_id, requester)
        _apply(car, data)
        return await self.store.save_car(car)

    async def delete(self, car_id: UUID, requester: User) -> None:
        car = await self._get_owned(car_id, requester)
        await self._delete(car)

    # ==================== ADMIN ====================

    async def admin_list(self, requester: User) -> list[Car]:
        _require_admin(requester)
        return await self.store.list_cars()

    async def admin_get(self, car_id: UUID, requester: User) -> tuple[Car, int]:
        _require_admin(requester)
        car = await self._get(car_id)
        return car, await self.store.count_bookings_for_car(car.id)

    async def admin_create(self, data: AdminCarCreate, requester: User) -> Car:
        _require_admin(requester)
        await self._require_user(data.user_id)
        car = Car(user_id=data.user_id, **_car_values(data))
        await self.store.add_car(car)
        logger.info(f"Car {car.id} registered for {data.user_id} by admin {requester.id}")
        return car

    async def admin_update(self, car_id: UUID, data: AdminCarUpdate, requester: User) -> Car:
        _require_admin(requester)
        car = await self._get(car_id)
        if data.user_id and data.user_id != car.user_id:
            await self._require_user(data.user_id)
            car.user_id = data.user_id
        _apply(car, data)
        return await self.store.save_car(car)

    async def admin_delete(self, car_id: UUID, requester: User) -> None:
        _require_admin(requester)
        car = await self._get(car_id)
        await self._delete(car)

    # ==================== HELPERS ====================

    async def _get(self, car_id: UUID) -> Car:
        car = await self.store.get_car(car_id)
        if not car:
            raise NotFoundError("Car", str(car_id))
        return car

    async def _get_owned(self, car_id: UUID, requester: User) -> Car:
        car = await self._get(car_id)
        if car.user_id != requester.id:
            raise ForbiddenError("You don't have permission to access this car")
        return car

    async def _require_user(self, user_id: str) -> None:
        if not await self.store.get_user(user_id):
            raise NotFoundError("User", user_id)

    async def _delete(self, car: Car) -> None:
        bookings_count = await self.store.count_bookings_for_car(car.id)
        if bookings_count > 0:
            raise VehicleInUseError(bookings_count)
        await self.store.delete_car(car)
        logger.info(f"Car {car.id} deleted")


def _require_admin(requester: User) -> None:
    if not requester.is_admin:
        raise ForbiddenError("Admin access required")


def _car_values(data: CarBase) -> dict:
    return {field: getattr(data, field) for field in CAR_FIELDS}


def _apply(car: Car, data: CarBase) -> None:
    for field, value in _car_values(data).items():
        setattr(car, field, value)
