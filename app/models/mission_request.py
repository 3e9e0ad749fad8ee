from uuid import UUID
from datetime import date, datetime
from typing import Optional
from sqlmodel import SQLModel, Field

from app.db.schema import MissionRequestStatus


class MissionRequestCreate(SQLModel):
    """Submitted by the client from the tracking page."""
    collection_site_id: UUID
    estimated_weight_tons: float = Field(
        gt=0,
        description="Estimated load in tons. Must be positive."
    )
    external_request_id: Optional[str] = Field(default=None, max_length=100)
    client_request_date: Optional[date] = None


class MissionRequestRead(SQLModel):
    id: UUID
    client_id: UUID
    collection_site_id: UUID
    estimated_weight_tons: float
    external_request_id: Optional[str] = None
    client_request_date: Optional[date] = None
    status: MissionRequestStatus
    viewed_by_admin_at: Optional[datetime] = None
    viewed_by_driver_at: Optional[datetime] = None
    converted_at: Optional[datetime] = None
    mission_id: Optional[UUID] = None
    created_at: datetime


class MissionRequestDetailsRead(MissionRequestRead):
    client_name: str = ""
    client_email: str = ""
    collection_site_name: str = ""
    collection_site_address: str = ""


class MissionSeed(SQLModel):
    """Values copied from a request into the mission creation form."""
    mission_request_id: UUID
    client_id: UUID
    collection_site_id: UUID
    estimated_weight_tons: float
    external_request_id: Optional[str] = None
    client_request_date: Optional[date] = None


class PendingCount(SQLModel):
    pending: int
