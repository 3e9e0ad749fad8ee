from uuid import UUID
from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class ClientBase(SQLModel):
    name: str = Field(min_length=1, max_length=200)
    siret: Optional[str] = Field(
        default=None, max_length=20, description="Company tax identifier")
    email: str = Field(min_length=3, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=30)
    address: Optional[str] = Field(default=None, max_length=500)


class ClientCreate(ClientBase):
    is_active: bool = True


class ClientUpdate(SQLModel):
    """The tracking token is not editable here, see the rotate endpoint."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    siret: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: Optional[bool] = None


class ClientRead(ClientBase):
    id: UUID
    tracking_token: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ClientPublicRead(SQLModel):
    """What a client sees about itself on the tracking page."""
    id: UUID
    name: str


class TrackingTokenRotate(SQLModel):
    revoke_previous: bool = Field(
        default=False,
        description="Also invalidate every previously issued token for this client."
    )


class TrackingLinkRead(SQLModel):
    tracking_token: str
    tracking_url: str
    qr_code_url: Optional[str] = None
