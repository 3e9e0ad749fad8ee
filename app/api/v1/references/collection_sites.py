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

from app.models.site import CollectionSiteCreate, CollectionSiteRead, CollectionSiteUpdate


router = APIRouter()


@router.post(
    "",
    response_model=CollectionSiteRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a Collection Site",
)
def create_collection_site(
    payload: CollectionSiteCreate,
    current_user: Profile = Depends(get_current_admin),
    service: SiteService = Depends(get_site_service)
):
    return service.create_collection_site(user=current_user, data=payload)


@router.get(
    "",
    response_model=List[CollectionSiteRead],
    summary="List Collection Sites",
)
def list_collection_sites(
    client_id: Optional[UUID] = Query(None, description="Only the sites of this client"),
    search: Optional[str] = Query(None, description="Filter by site name"),
    include_inactive: bool = Query(False),
    current_user: Profile = Depends(get_current_user),
    service: SiteService = Depends(get_site_service)
):
    return service.list_collection_sites(
        user=current_user, client_id=client_id, search_query=search,
        include_inactive=include_inactive)


@router.patch(
    "/{site_id}",
    response_model=CollectionSiteRead,
    summary="Update a Collection Site",
)
def update_collection_site(
    site_id: UUID,
    payload: CollectionSiteUpdate,
    current_user: Profile = Depends(get_current_admin),
    service: SiteService = Depends(get_site_service)
):
    return service.update_collection_site(user=current_user, site_id=site_id, data=payload)


@router.delete(
    "/{site_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a Collection Site",
)
def delete_collection_site(
    site_id: UUID,
    current_user: Profile = Depends(get_current_admin),
    service: SiteService = Depends(get_site_service)
):
    """
    **Constraints:**
    - Cannot delete if a mission or a request uses it (409).
    """
    return service.delete_collection_site(user=current_user, site_id=site_id)
