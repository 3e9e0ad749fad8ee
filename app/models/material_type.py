from uuid import UUID
from sqlmodel import SQLModel, Field
from typing_extensions import Optional


class MaterialTypeBase(SQLModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)


class MaterialTypeCreate(MaterialTypeBase):
    is_active: bool = True


class MaterialTypeUpdate(SQLModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class MaterialTypeRead(MaterialTypeBase):
    id: UUID
    is_active: bool
