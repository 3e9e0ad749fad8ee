from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, status, Query

from app.core.dependencies import (
    get_current_user,
    get_current_admin,
    get_client_service,
)
from app.db.schema import Profile
from app.services.references.client import ClientService

from app.models.client import (
    ClientCreate, ClientRead, ClientUpdate, TrackingLinkRead, TrackingTokenRotate
)


router = APIRouter()


@router.post(
    "",
    response_model=ClientRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a Client",
)
def create_client(
    payload: ClientCreate,
    current_user: Profile = Depends(get_current_admin),
    service: ClientService = Depends(get_client_service)
):
    """
    Creates a client and issues its first tracking token.
    """
    return service.create_client(user=current_user, data=payload)


@router.get(
    "",
    response_model=List[ClientRead],
    summary="List Clients",
    description="Drivers only ever see active clients."
)
def list_clients(
    search: Optional[str] = Query(None, description="Filter by name, email or SIRET"),
    include_inactive: bool = Query(False),
    current_user: Profile = Depends(get_current_user),
    service: ClientService = Depends(get_client_service)
):
    return service.list_clients(
        user=current_user, search_query=search, include_inactive=include_inactive)


@router.get(
    "/{client_id}",
    response_model=ClientRead,
    summary="Get a Client",
)
def get_client(
    client_id: UUID,
    current_user: Profile = Depends(get_current_admin),
    service: ClientService = Depends(get_client_service)
):
    return service.get_client(client_id)


@router.patch(
    "/{client_id}",
    response_model=ClientRead,
    summary="Update a Client",
)
def update_client(
    client_id: UUID,
    payload: ClientUpdate,
    current_user: Profile = Depends(get_current_admin),
    service: ClientService = Depends(get_client_service)
):
    return service.update_client(user=current_user, client_id=client_id, data=payload)


@router.delete(
    "/{client_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a Client",
)
def delete_client(
    client_id: UUID,
    current_user: Profile = Depends(get_current_admin),
    service: ClientService = Depends(get_client_service)
):
    """
    Deletes a client with its collection sites.

    **Constraints:**
    - Cannot delete if missions or requests reference it (409).
    """
    return service.delete_client(user=current_user, client_id=client_id)


@router.post(
    "/{client_id}/tracking-token/rotate",
    response_model=ClientRead,
    summary="Issue a new tracking token",
)
def rotate_tracking_token(
    client_id: UUID,
    payload: TrackingTokenRotate,
    current_user: Profile = Depends(get_current_admin),
    service: ClientService = Depends(get_client_service)
):
    """
    Previous tokens keep working unless `revoke_previous` is true.
    """
    return service.rotate_tracking_token(
        user=current_user, client_id=client_id, revoke_previous=payload.revoke_previous)


@router.get(
    "/{client_id}/tracking-qr",
    response_model=TrackingLinkRead,
    summary="Tracking link and QR code",
)
def get_tracking_qr(
    client_id: UUID,
    current_user: Profile = Depends(get_current_admin),
    service: ClientService = Depends(get_client_service)
):
    return service.get_tracking_link(client_id, with_qr=True)
