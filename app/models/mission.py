from uuid import UUID
from datetime import date, datetime
from typing import Optional
from pydantic import Field as PydanticField
from sqlmodel import SQLModel, Field
from typing_extensions import Annotated

from app.db.schema import MissionStatus


# Accepts numeric strings ("35752") as sent by weighbridge forms.
WeightKg = Annotated[float, PydanticField(ge=0, allow_inf_nan=False)]


class MissionBase(SQLModel):
    client_id: UUID
    collection_site_id: UUID
    deposit_site_id: UUID
    vehicle_id: UUID
    material_type_id: UUID
    mission_date: date = Field(default_factory=date.today)
    empty_weight_kg: WeightKg
    loaded_weight_kg: WeightKg
    driver_comment: Optional[str] = Field(default=None, max_length=2000)
    order_number: Optional[str] = Field(default=None, max_length=100)


class MissionCreate(MissionBase):
    """
    Payload for a new mission.

    - **driver_id**: required for admins, ignored for drivers (always themselves).
    - **status**: defaults to 'completed' for drivers and 'validated' for admins.
    """
    driver_id: Optional[UUID] = None
    status: Optional[MissionStatus] = None


class MissionFromRequest(SQLModel):
    """
    Fields completed by the driver/admin when converting a client request.
    Client and collection site come from the request itself.
    """
    driver_id: Optional[UUID] = None
    deposit_site_id: UUID
    vehicle_id: UUID
    material_type_id: UUID
    mission_date: date = Field(default_factory=date.today)
    empty_weight_kg: WeightKg
    loaded_weight_kg: WeightKg
    driver_comment: Optional[str] = Field(default=None, max_length=2000)
    order_number: Optional[str] = Field(default=None, max_length=100)
    status: Optional[MissionStatus] = None


class MissionUpdate(SQLModel):
    client_id: Optional[UUID] = None
    driver_id: Optional[UUID] = None
    collection_site_id: Optional[UUID] = None
    deposit_site_id: Optional[UUID] = None
    vehicle_id: Optional[UUID] = None
    material_type_id: Optional[UUID] = None
    mission_date: Optional[date] = None
    empty_weight_kg: Optional[WeightKg] = None
    loaded_weight_kg: Optional[WeightKg] = None
    driver_comment: Optional[str] = Field(default=None, max_length=2000)
    order_number: Optional[str] = Field(default=None, max_length=100)
    status: Optional[MissionStatus] = None
    expected_version: Optional[int] = Field(
        default=None,
        description="Version the caller last read. The update is rejected with 409 if the mission changed since."
    )


class MissionRead(MissionBase):
    id: UUID
    driver_id: UUID
    net_weight_tons: float
    mission_request_id: Optional[UUID] = None
    external_request_id: Optional[str] = None
    client_request_date: Optional[date] = None
    status: MissionStatus
    validated_at: Optional[datetime] = None
    version: int
    created_at: datetime
    updated_at: datetime


class MissionDetailsRead(MissionRead):
    """Mission joined with the names of everything it references. Also the row type of reports."""
    client_name: str = ""
    driver_name: str = ""
    collection_site_name: str = ""
    collection_site_address: str = ""
    deposit_site_name: str = ""
    deposit_site_address: str = ""
    vehicle_name: str = ""
    vehicle_license_plate: str = ""
    material_type_name: str = ""
