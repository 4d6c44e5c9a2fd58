"""Request/response schemas for role endpoints."""

from datetime import datetime

from pydantic import Field, field_validator

from strongroom.models.role import Action, Resource
from strongroom.schemas.common import APIModel


class PermissionSpec(APIModel):
    """One resource with the actions granted on it; expands to one grant per action."""

    resource: Resource
    action: list[Action] = Field(..., min_length=1)


def _strip_name(v: str | None) -> str | None:
    if v is None:
        return v
    if not v.strip():
        raise ValueError("name must be non-empty")
    return v.strip()


class RoleCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=255)
    permissions: list[PermissionSpec] | None = None

    strip_name = field_validator("name")(_strip_name)


class RoleUpdate(APIModel):
    """permissions, when present, replaces every existing grant of the role."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    permissions: list[PermissionSpec] | None = None

    strip_name = field_validator("name")(_strip_name)


class PermissionRead(APIModel):
    id: str
    resource: Resource
    action: Action
    created_at: datetime


class RoleRead(APIModel):
    id: str
    name: str
    permissions: list[PermissionRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
