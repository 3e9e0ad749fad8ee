from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, status, Query

from app.core.dependencies import (
    get_current_user,
    get_current_admin,
    get_vehicle_service,
)
from app.db.schema import Profile
from app.services.references.vehicle import VehicleService

from app.models.vehicle import VehicleCreate, VehicleRead, VehicleUpdate


router = APIRouter()


@router.post(
    "",
    response_model=VehicleRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a Vehicle",
)
def create_vehicle(
    payload: VehicleCreate,
    current_user: Profile = Depends(get_current_admin),
    service: VehicleService = Depends(get_vehicle_service)
):
    """
    - **License plate**: stored uppercase, must be unique.
    """
    return service.create_vehicle(user=current_user, data=payload)


@router.get(
    "",
    response_model=List[VehicleRead],
    summary="List Vehicles",
)
def list_vehicles(
    search: Optional[str] = Query(None, description="Filter by name or plate"),
    include_inactive: bool = Query(False),
    current_user: Profile = Depends(get_current_user),
    service: VehicleService = Depends(get_vehicle_service)
):
    return service.list_vehicles(
        user=current_user, search_query=search, include_inactive=include_inactive)


@router.patch(
    "/{vehicle_id}",
    response_model=VehicleRead,
    summary="Update a Vehicle",
)
def update_vehicle(
    vehicle_id: UUID,
    payload: VehicleUpdate,
    current_user: Profile = Depends(get_current_admin),
    service: VehicleService = Depends(get_vehicle_service)
):
    return service.update_vehicle(user=current_user, vehicle_id=vehicle_id, data=payload)


@router.delete(
    "/{vehicle_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a Vehicle",
)
def delete_vehicle(
    vehicle_id: UUID,
    current_user: Profile = Depends(get_current_admin),
    service: VehicleService = Depends(get_vehicle_service)
):
    return service.delete_vehicle(user=current_user, vehicle_id=vehicle_id)
