from typing import List, Optional
from uuid import UUID
from fastapi import HTTPException, status
from sqlmodel import Session, select, col, or_
from loguru import logger

from app.db.schema import Profile, ProfileRole, Vehicle, Mission
from app.models.vehicle import VehicleCreate, VehicleUpdate


class VehicleService:
    """CRUD for the fleet. License plates are unique."""

    def __init__(self, session: Session):
        self.session = session

    def _get(self, vehicle_id: UUID) -> Vehicle:
        vehicle = self.session.get(Vehicle, vehicle_id)

        if not vehicle:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Vehicle not found."
            )
        return vehicle

    def _ensure_plate_free(self, license_plate: str):
        existing = self.session.exec(
            select(Vehicle).where(Vehicle.license_plate == license_plate)
        ).first()

        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Vehicle with license plate '{license_plate}' already exists."
            )

    def create_vehicle(self, user: Profile, data: VehicleCreate) -> Vehicle:
        data.license_plate = data.license_plate.strip().upper()
        self._ensure_plate_free(data.license_plate)

        vehicle = Vehicle(**data.model_dump())
        self.session.add(vehicle)
        self.session.commit()
        self.session.refresh(vehicle)

        logger.info(f"Vehicle {vehicle.license_plate} created by {user.id}")
        return vehicle

    def list_vehicles(
        self,
        user: Profile,
        search_query: Optional[str] = None,
        include_inactive: bool = False
    ) -> List[Vehicle]:
        query = select(Vehicle)

        if user.role != ProfileRole.SUPER_ADMIN or not include_inactive:
            query = query.where(Vehicle.is_active == True)

        if search_query:
            pattern = f"%{search_query}%"
            query = query.where(or_(
                col(Vehicle.name).ilike(pattern),
                col(Vehicle.license_plate).ilike(pattern)
            ))

        return self.session.exec(query.order_by(Vehicle.license_plate)).all()

    def update_vehicle(self, user: Profile, vehicle_id: UUID, data: VehicleUpdate) -> Vehicle:
        vehicle = self._get(vehicle_id)

        if data.license_plate is not None:
            data.license_plate = data.license_plate.strip().upper()
            if data.license_plate != vehicle.license_plate:
                self._ensure_plate_free(data.license_plate)

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(vehicle, key, value)

        self.session.add(vehicle)
        self.session.commit()
        self.session.refresh(vehicle)
        return vehicle

    def delete_vehicle(self, user: Profile, vehicle_id: UUID):
        vehicle = self._get(vehicle_id)

        in_use = self.session.exec(
            select(Mission.id).where(Mission.vehicle_id == vehicle_id).limit(1)
        ).first()

        if in_use:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot delete this vehicle because missions use it. Deactivate it instead."
            )

        self.session.delete(vehicle)
        self.session.commit()

        logger.info(f"Vehicle {vehicle_id} deleted by {user.id}")
        return {"status": "deleted", "id": vehicle_id}
