from datetime import date
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from app.core.dependencies import get_current_user, get_mission_service
from app.db.schema import Profile
from app.models.mission import MissionCreate, MissionDetailsRead, MissionUpdate
from app.services.mission import MissionService


router = APIRouter()


@router.get(
    "",
    response_model=List[MissionDetailsRead],
    summary="List missions",
    description="Admins see every mission, drivers only their own. Most recent first."
)
def list_missions(
    mission_date: Optional[date] = Query(None, description="Only missions of this day"),
    current_user: Profile = Depends(get_current_user),
    service: MissionService = Depends(get_mission_service)
):
    return service.list_missions(current_user, mission_date=mission_date)


@router.post(
    "",
    response_model=MissionDetailsRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record a mission",
)
def create_mission(
    payload: MissionCreate,
    background_tasks: BackgroundTasks,
    current_user: Profile = Depends(get_current_user),
    service: MissionService = Depends(get_mission_service)
):
    """
    Records a collection with its two weighings.

    - **Weights**: kilograms, the loaded weight must exceed the empty weight.
    - **Net weight**: computed by the server, (loaded - empty) / 1000 tons.
    - **Drivers**: the mission is always theirs and cannot be created validated.
    """
    return service.create_mission(current_user, payload, background_tasks)


@router.get(
    "/{mission_id}",
    response_model=MissionDetailsRead,
    summary="Get a mission",
)
def get_mission(
    mission_id: UUID,
    current_user: Profile = Depends(get_current_user),
    service: MissionService = Depends(get_mission_service)
):
    return service.get_mission(current_user, mission_id)


@router.patch(
    "/{mission_id}",
    response_model=MissionDetailsRead,
    summary="Update a mission",
)
def update_mission(
    mission_id: UUID,
    payload: MissionUpdate,
    background_tasks: BackgroundTasks,
    current_user: Profile = Depends(get_current_user),
    service: MissionService = Depends(get_mission_service)
):
    """
    Partial update. Send `expected_version` to be told (409) when someone
    else changed the mission in the meantime.
    """
    return service.update_mission(current_user, mission_id, payload, background_tasks)


@router.post(
    "/{mission_id}/validate",
    response_model=MissionDetailsRead,
    summary="Validate a mission",
)
def validate_mission(
    mission_id: UUID,
    background_tasks: BackgroundTasks,
    current_user: Profile = Depends(get_current_user),
    service: MissionService = Depends(get_mission_service)
):
    return service.validate_mission(current_user, mission_id, background_tasks)


@router.post(
    "/{mission_id}/unvalidate",
    response_model=MissionDetailsRead,
    summary="Send a validated mission back to completed",
)
def unvalidate_mission(
    mission_id: UUID,
    background_tasks: BackgroundTasks,
    current_user: Profile = Depends(get_current_user),
    service: MissionService = Depends(get_mission_service)
):
    return service.unvalidate_mission(current_user, mission_id, background_tasks)


@router.delete(
    "/{mission_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a mission",
)
def delete_mission(
    mission_id: UUID,
    background_tasks: BackgroundTasks,
    confirm: bool = Query(False, description="Must be true"),
    current_user: Profile = Depends(get_current_user),
    service: MissionService = Depends(get_mission_service)
):
    return service.delete_mission(current_user, mission_id, confirm, background_tasks)
