from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, status, Query

from app.core.dependencies import (
    get_current_user,
    get_current_admin,
    get_site_service,
)
from app.db.schema import Profile
from app.services.references.site import SiteService

from app.models.site import DepositSiteCreate, DepositSiteRead, DepositSiteUpdate


router = APIRouter()


@router.post(
    "",
    response_model=DepositSiteRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a Deposit Site",
)
def create_deposit_site(
    payload: DepositSiteCreate,
    current_user: Profile = Depends(get_current_admin),
    service: SiteService = Depends(get_site_service)
):
    return service.create_deposit_site(user=current_user, data=payload)


@router.get(
    "",
    response_model=List[DepositSiteRead],
    summary="List Deposit Sites",
)
def list_deposit_sites(
    search: Optional[str] = Query(None, description="Filter by site name"),
    include_inactive: bool = Query(False),
    current_user: Profile = Depends(get_current_user),
    service: SiteService = Depends(get_site_service)
):
    return service.list_deposit_sites(
        user=current_user, search_query=search, include_inactive=include_inactive)


@router.patch(
    "/{site_id}",
    response_model=DepositSiteRead,
    summary="Update a Deposit Site",
)
def update_deposit_site(
    site_id: UUID,
    payload: DepositSiteUpdate,
    current_user: Profile = Depends(get_current_admin),
    service: SiteService = Depends(get_site_service)
):
    return service.update_deposit_site(user=current_user, site_id=site_id, data=payload)


@router.delete(
    "/{site_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a Deposit Site",
)
def delete_deposit_site(
    site_id: UUID,
    current_user: Profile = Depends(get_current_admin),
    service: SiteService = Depends(get_site_service)
):
    return service.delete_deposit_site(user=current_user, site_id=site_id)
