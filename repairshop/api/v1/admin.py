"""Admin endpoints: dashboard stats and vehicle management."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from repairshop.api.deps import CurrentAdmin, get_booking_service, get_vehicle_service
from repairshop.schemas.booking import BookingStats
from repairshop.schemas.car import (
    AdminCarCreate,
    AdminCarUpdate,
    CarDetailResponse,
    CarResponse,
)
from repairshop.services.booking_service import BookingService
from repairshop.services.vehicle_service import VehicleService

router = APIRouter()

Vehicles = Annotated[VehicleService, Depends(get_vehicle_service)]


@router.get("/stats", response_model=BookingStats)
async def get_stats(
    current_user: CurrentAdmin,
    bookings: Annotated[BookingService, Depends(get_booking_service)],
) -> BookingStats:
    """Booking counts per status and completed revenue."""
    return BookingStats.model_validate(await bookings.stats(current_user))


# ==================== VEHICLES ====================


@router.get("/cars", response_model=list[CarResponse])
async def list_all_cars(current_user: CurrentAdmin, vehicles: Vehicles) -> list[CarResponse]:
    cars = await vehicles.admin_list(current_user)
    return [CarResponse.model_validate(car) for car in cars]


@router.post("/cars", response_model=CarResponse, status_code=status.HTTP_201_CREATED)
async def create_car_for_user(
    data: AdminCarCreate,
    current_user: CurrentAdmin,
    vehicles: Vehicles,
) -> CarResponse:
    """Register a car on behalf of a customer."""
    car = await vehicles.admin_create(data, current_user)
    return CarResponse.model_validate(car)


@router.get("/cars/{car_id}", response_model=CarDetailResponse)
async def get_any_car(car_id: UUID, current_user: CurrentAdmin, vehicles: Vehicles) -> CarDetailResponse:
    car, bookings_count = await vehicles.admin_get(car_id, current_user)
    response = CarDetailResponse.model_validate(car)
    response.bookings_count = bookings_count
    return response


@router.put("/cars/{car_id}", response_model=CarResponse)
async def update_any_car(
    car_id: UUID,
    data: AdminCarUpdate,
    current_user: CurrentAdmin,
    vehicles: Vehicles,
) -> CarResponse:
    """Replace a car's details, optionally moving it to another owner."""
    car = await vehicles.admin_update(car_id, data, current_user)
    return CarResponse.model_validate(car)


@router.delete("/cars/{car_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_any_car(car_id: UUID, current_user: CurrentAdmin, vehicles: Vehicles) -> None:
    await vehicles.admin_delete(car_id, current_user)
