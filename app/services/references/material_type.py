from typing import List, Optional
from uuid import UUID
from fastapi import HTTPException, status
from sqlmodel import Session, select, col
from loguru import logger

from app.db.schema import (
    Profile, ProfileRole, MaterialType, Mission
)
from app.models.material_type import MaterialTypeCreate, MaterialTypeUpdate


class MaterialTypeService:
    """
    Service layer for the categories of collected material.
    Handles CRUD operations with referential integrity checks against missions.
    """

    def __init__(self, session: Session):
        """
        Initializes the service with a database session.

        Args:
            session (Session): The SQLModel database session.
        """
        self.session = session

    def _get(self, material_type_id: UUID) -> MaterialType:
        material_type = self.session.get(MaterialType, material_type_id)

        if not material_type:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Material type not found."
            )
        return material_type

    def _ensure_name_free(self, name: str):
        existing = self.session.exec(
            select(MaterialType).where(MaterialType.name == name)
        ).first()

        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Material type '{name}' already exists."
            )

    def create_material_type(self, user: Profile, data: MaterialTypeCreate) -> MaterialType:
        """
        Creates a new material type.

        Raises:
            HTTPException(409): If a material type with the same name exists.
        """
        self._ensure_name_free(data.name)

        material_type = MaterialType(**data.model_dump())
        self.session.add(material_type)
        self.session.commit()
        self.session.refresh(material_type)

        logger.info(f"Material type {material_type.id} created by {user.id}")
        return material_type

    def list_material_types(
        self,
        user: Profile,
        search_query: Optional[str] = None,
        include_inactive: bool = False
    ) -> List[MaterialType]:
        """
        Retrieves material types ordered by name.

        Drivers only ever see active entries; admins may ask for inactive ones
        too (management screen).
        """
        query = select(MaterialType)

        if user.role != ProfileRole.SUPER_ADMIN or not include_inactive:
            query = query.where(MaterialType.is_active == True)

        if search_query:
            query = query.where(col(MaterialType.name).ilike(f"%{search_query}%"))

        return self.session.exec(query.order_by(MaterialType.name)).all()

    def update_material_type(self, user: Profile, material_type_id: UUID, data: MaterialTypeUpdate) -> MaterialType:
        """
        Raises:
            HTTPException(404): If the material type does not exist.
            HTTPException(409): If the new name is already taken.
        """
        material_type = self._get(material_type_id)

        if data.name is not None and data.name != material_type.name:
            self._ensure_name_free(data.name)

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(material_type, key, value)

        self.session.add(material_type)
        self.session.commit()
        self.session.refresh(material_type)
        return material_type

    def delete_material_type(self, user: Profile, material_type_id: UUID):
        """
        Deletes a material type permanently.

        Raises:
            HTTPException(404): If the material type is not found.
            HTTPException(409): If missions reference it (deactivate instead).
        """
        material_type = self._get(material_type_id)

        in_use = self.session.exec(
            select(Mission.id).where(
                Mission.material_type_id == material_type_id).limit(1)
        ).first()

        if in_use:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot delete this material type because missions use it. Deactivate it instead."
            )

        self.session.delete(material_type)
        self.session.commit()

        logger.info(f"Material type {material_type_id} deleted by {user.id}")
        return {"status": "deleted", "id": material_type_id}
