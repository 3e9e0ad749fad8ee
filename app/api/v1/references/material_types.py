from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, status, Query

from app.core.dependencies import (
    get_current_user,
    get_current_admin,
    get_material_type_service,
)
from app.db.schema import Profile
from app.services.references.material_type import MaterialTypeService

from app.models.material_type import MaterialTypeCreate, MaterialTypeRead, MaterialTypeUpdate


router = APIRouter()


@router.post(
    "",
    response_model=MaterialTypeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a Material Type",
)
def create_material_type(
    payload: MaterialTypeCreate,
    current_user: Profile = Depends(get_current_admin),
    service: MaterialTypeService = Depends(get_material_type_service)
):
    return service.create_material_type(user=current_user, data=payload)


@router.get(
    "",
    response_model=List[MaterialTypeRead],
    summary="List Material Types",
)
def list_material_types(
    search: Optional[str] = Query(None, description="Filter by name"),
    include_inactive: bool = Query(False),
    current_user: Profile = Depends(get_current_user),
    service: MaterialTypeService = Depends(get_material_type_service)
):
    return service.list_material_types(
        user=current_user, search_query=search, include_inactive=include_inactive)


@router.patch(
    "/{material_type_id}",
    response_model=MaterialTypeRead,
    summary="Update a Material Type",
)
def update_material_type(
    material_type_id: UUID,
    payload: MaterialTypeUpdate,
    current_user: Profile = Depends(get_current_admin),
    service: MaterialTypeService = Depends(get_material_type_service)
):
    return service.update_material_type(
        user=current_user, material_type_id=material_type_id, data=payload)


@router.delete(
    "/{material_type_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a Material Type",
)
def delete_material_type(
    material_type_id: UUID,
    current_user: Profile = Depends(get_current_admin),
    service: MaterialTypeService = Depends(get_material_type_service)
):
    """
    **Constraints:**
    - Cannot delete if a mission uses it (409). Deactivate it instead.
    """
    return service.delete_material_type(user=current_user, material_type_id=material_type_id)
