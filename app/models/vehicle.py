from uuid import UUID
from typing import Optional
from sqlmodel import SQLModel, Field


class VehicleBase(SQLModel):
    name: str = Field(min_length=1, max_length=100)
    license_plate: str = Field(min_length=1, max_length=20)
    vehicle_type: str = Field(min_length=1, max_length=50)


class VehicleCreate(VehicleBase):
    is_active: bool = True


class VehicleUpdate(SQLModel):
    name: Optional[str] = None
    license_plate: Optional[str] = None
    vehicle_type: Optional[str] = None
    is_active: Optional[bool] = None


class VehicleRead(VehicleBase):
    id: UUID
    is_active: bool
