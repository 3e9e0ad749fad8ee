from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from app.core.dependencies import get_current_user, get_mission_request_service
from app.db.schema import MissionRequestStatus, Profile
from app.models.mission import MissionDetailsRead, MissionFromRequest
from app.models.mission_request import (
    MissionRequestDetailsRead, MissionSeed, PendingCount
)
from app.services.mission_request import MissionRequestService


router = APIRouter()


@router.get(
    "",
    response_model=List[MissionRequestDetailsRead],
    summary="List client requests",
)
def list_requests(
    status_filter: Optional[MissionRequestStatus] = Query(None, alias="status"),
    current_user: Profile = Depends(get_current_user),
    service: MissionRequestService = Depends(get_mission_request_service)
):
    return service.list_requests(current_user, status_filter=status_filter)


@router.get(
    "/pending-count",
    response_model=PendingCount,
    summary="Number of pending requests",
)
def pending_count(
    current_user: Profile = Depends(get_current_user),
    service: MissionRequestService = Depends(get_mission_request_service)
):
    return PendingCount(pending=service.count_pending())


@router.post(
    "/{request_id}/viewed",
    response_model=MissionRequestDetailsRead,
    summary="Mark a request as viewed",
)
def mark_viewed(
    request_id: UUID,
    current_user: Profile = Depends(get_current_user),
    service: MissionRequestService = Depends(get_mission_request_service)
):
    return service.mark_viewed(current_user, request_id)


@router.get(
    "/{request_id}/mission-seed",
    response_model=MissionSeed,
    summary="Values to pre-fill a mission from a request",
)
def mission_seed(
    request_id: UUID,
    current_user: Profile = Depends(get_current_user),
    service: MissionRequestService = Depends(get_mission_request_service)
):
    return service.get_mission_seed(current_user, request_id)


@router.post(
    "/{request_id}/convert",
    response_model=MissionDetailsRead,
    status_code=status.HTTP_201_CREATED,
    summary="Convert a request into a mission",
)
def convert_request(
    request_id: UUID,
    payload: MissionFromRequest,
    background_tasks: BackgroundTasks,
    current_user: Profile = Depends(get_current_user),
    service: MissionRequestService = Depends(get_mission_request_service)
):
    """
    Creates the mission and marks the request converted in one transaction.
    A request can only be converted once (409).
    """
    return service.convert_to_mission(current_user, request_id, payload, background_tasks)


@router.delete(
    "/{request_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a request",
)
def delete_request(
    request_id: UUID,
    background_tasks: BackgroundTasks,
    confirm: bool = Query(False, description="Must be true"),
    current_user: Profile = Depends(get_current_user),
    service: MissionRequestService = Depends(get_mission_request_service)
):
    return service.delete_request(current_user, request_id, confirm, background_tasks)
