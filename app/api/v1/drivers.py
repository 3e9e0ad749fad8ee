from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status

from app.core.dependencies import get_account_service, get_current_admin
from app.db.schema import Profile
from app.models.profile import (
    DriverActiveUpdate, DriverCreate, DriverUpdate, PasswordUpdate, ProfileRead
)
from app.services.account import AccountService


router = APIRouter()


@router.get(
    "",
    response_model=List[ProfileRead],
    summary="List drivers",
)
def list_drivers(
    active_only: bool = Query(False, description="Hide deactivated drivers"),
    current_user: Profile = Depends(get_current_admin),
    service: AccountService = Depends(get_account_service)
):
    return service.list_drivers(active_only=active_only)


@router.post(
    "",
    response_model=ProfileRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a driver account",
)
def create_driver(
    payload: DriverCreate,
    current_user: Profile = Depends(get_current_admin),
    service: AccountService = Depends(get_account_service)
):
    return service.create_driver(payload)


@router.patch(
    "/{driver_id}",
    response_model=ProfileRead,
    summary="Update a driver",
)
def update_driver(
    driver_id: UUID,
    payload: DriverUpdate,
    current_user: Profile = Depends(get_current_admin),
    service: AccountService = Depends(get_account_service)
):
    return service.update_driver(driver_id, payload)


@router.put(
    "/{driver_id}/active",
    response_model=ProfileRead,
    summary="Activate or deactivate a driver",
)
def set_driver_active(
    driver_id: UUID,
    payload: DriverActiveUpdate,
    current_user: Profile = Depends(get_current_admin),
    service: AccountService = Depends(get_account_service)
):
    return service.set_driver_active(driver_id, payload.is_active)


@router.delete(
    "/{driver_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a driver",
)
def delete_driver(
    driver_id: UUID,
    current_user: Profile = Depends(get_current_admin),
    service: AccountService = Depends(get_account_service)
):
    """
    Deletes the driver account permanently.

    **Constraints:**
    - Refused (400) when the driver has at least one mission. Deactivate instead.
    """
    return service.delete_driver(driver_id)


@router.put(
    "/{driver_id}/password",
    status_code=status.HTTP_200_OK,
    summary="Set a driver's password",
)
def update_driver_password(
    driver_id: UUID,
    payload: PasswordUpdate,
    current_user: Profile = Depends(get_current_admin),
    service: AccountService = Depends(get_account_service)
):
    return service.update_driver_password(driver_id, payload.password)
