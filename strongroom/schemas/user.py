"""Request/response schemas for user endpoints. The password hash is never serialized."""

from datetime import datetime

from pydantic import EmailStr, Field

from strongroom.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from strongroom.models.user import UserStatus
from strongroom.schemas.common import APIModel


class UserCreate(APIModel):
    email: EmailStr = Field(..., description="User email address")
    name: str | None = Field(default=None, max_length=255, description="Display name")
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Plain-text password; stored as a bcrypt hash",
    )
    role_id: str | None = Field(default=None, description="Role to assign")


class UserUpdate(APIModel):
    """Partial update; omitted fields are left unchanged."""

    email: EmailStr | None = None
    name: str | None = Field(default=None, max_length=255)
    password: str | None = Field(
        default=None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN
    )
    role_id: str | None = None


class UserStatusUpdate(APIModel):
    status: UserStatus


class UserRead(APIModel):
    id: str
    email: str
    name: str | None = None
    status: UserStatus
    role_id: str | None = None
    deleted_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
