"""Customer vehicle endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from repairshop.api.deps import CurrentUser, get_vehicle_service
from repairshop.schemas.car import CarCreate, CarDetailResponse, CarResponse, CarUpdate
from repairshop.services.vehicle_service import VehicleService

router = APIRouter()

Vehicles = Annotated[VehicleService, Depends(get_vehicle_service)]


@router.get("", response_model=list[CarResponse])
async def list_my_cars(current_user: CurrentUser, vehicles: Vehicles) -> list[CarResponse]:
    """List the signed-in user's cars."""
    cars = await vehicles.list_own(current_user)
    return [CarResponse.model_validate(car) for car in cars]


@router.post("", response_model=CarResponse, status_code=status.HTTP_201_CREATED)
async def create_car(
    data: CarCreate,
    current_user: CurrentUser,
    vehicles: Vehicles,
) -> CarResponse:
    """Register a car."""
    car = await vehicles.create(data, current_user)
    return CarResponse.model_validate(car)


@router.get("/{car_id}", response_model=CarDetailResponse)
async def get_car(car_id: UUID, current_user: CurrentUser, vehicles: Vehicles) -> CarDetailResponse:
    """Get one of the user's cars."""
    car, bookings_count = await vehicles.get_own(car_id, current_user)
    response = CarDetailResponse.model_validate(car)
    response.bookings_count = bookings_count
    return response


@router.put("/{car_id}", response_model=CarResponse)
async def update_car(
    car_id: UUID,
    data: CarUpdate,
    current_user: CurrentUser,
    vehicles: Vehicles,
) -> CarResponse:
    """Replace a car's details."""
    car = await vehicles.update(car_id, data, current_user)
    return CarResponse.model_validate(car)


@router.delete("/{car_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_car(car_id: UUID, current_user: CurrentUser, vehicles: Vehicles) -> None:
    """Delete a car that has no bookings."""
    await vehicles.delete(car_id, current_user)
