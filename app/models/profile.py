from uuid import UUID
from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field
from pydantic import EmailStr, StringConstraints
from typing_extensions import Annotated
from app.db.schema import ProfileRole


class ProfileRead(SQLModel):
    id: UUID
    email: str
    full_name: str
    role: ProfileRole
    phone: Optional[str] = None
    is_active: bool
    created_at: datetime


class ProfileSignin(SQLModel):
    email: Annotated[EmailStr, StringConstraints(to_lower=True)] = Field(
        description="Registered email address of the user.",
        max_length=255
    )
    password: str = Field(
        min_length=1,
        max_length=128,
        description="Plain text password."
    )


class DriverCreate(SQLModel):
    """DTO used by the admin to open a driver account."""
    full_name: str = Field(min_length=1, max_length=100)
    email: Annotated[EmailStr, StringConstraints(to_lower=True)] = Field(
        description="Unique email address for signin.",
        max_length=255
    )
    password: str = Field(
        min_length=8,
        max_length=128,
        description="Initial password, at least 8 characters."
    )
    phone: Optional[str] = Field(default=None, max_length=30)


class DriverUpdate(SQLModel):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=30)
    is_active: Optional[bool] = None


class DriverActiveUpdate(SQLModel):
    is_active: bool


class PasswordUpdate(SQLModel):
    """
    New password for a driver, set by the admin.
    Length is checked by the service so the caller gets a 400, not a 422.
    """
    password: str = Field(max_length=128)


class OwnPasswordUpdate(SQLModel):
    current_password: str
    new_password: str = Field(min_length=8, max_length=128)


class OwnEmailUpdate(SQLModel):
    new_email: Annotated[EmailStr, StringConstraints(to_lower=True)] = Field(
        max_length=255)
    password: str = Field(description="Current password, to confirm the change.")


class AdminBootstrapRead(SQLModel):
    success: bool
    email: str
    user_id: UUID
