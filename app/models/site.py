from uuid import UUID
from typing import Optional
from sqlmodel import SQLModel, Field


class CollectionSiteBase(SQLModel):
    client_id: UUID
    name: str = Field(min_length=1, max_length=200)
    address: str = Field(min_length=1, max_length=500)


class CollectionSiteCreate(CollectionSiteBase):
    is_active: bool = True


class CollectionSiteUpdate(SQLModel):
    client_id: Optional[UUID] = None
    name: Optional[str] = None
    address: Optional[str] = None
    is_active: Optional[bool] = None


class CollectionSiteRead(CollectionSiteBase):
    id: UUID
    is_active: bool


class DepositSiteBase(SQLModel):
    name: str = Field(min_length=1, max_length=200)
    address: str = Field(min_length=1, max_length=500)


class DepositSiteCreate(DepositSiteBase):
    is_active: bool = True


class DepositSiteUpdate(SQLModel):
    name: Optional[str] = None
    address: Optional[str] = None
    is_active: Optional[bool] = None


class DepositSiteRead(DepositSiteBase):
    id: UUID
    is_active: bool
