"""Pydantic request/response schemas."""

from strongroom.schemas.auth import CurrentUser, LoginRequest, TokenResponse
from strongroom.schemas.file import FileRead
from strongroom.schemas.health import HealthResponse
from strongroom.schemas.pagination import Paginated, PaginationMeta
from strongroom.schemas.role import (
    PermissionRead,
    PermissionSpec,
    RoleCreate,
    RoleRead,
    RoleUpdate,
)
from strongroom.schemas.user import UserCreate, UserRead, UserStatusUpdate, UserUpdate

__all__ = [
    "CurrentUser",
    "FileRead",
    "HealthResponse",
    "LoginRequest",
    "Paginated",
    "PaginationMeta",
    "PermissionRead",
    "PermissionSpec",
    "RoleCreate",
    "RoleRead",
    "RoleUpdate",
    "TokenResponse",
    "UserCreate",
    "UserRead",
    "UserStatusUpdate",
    "UserUpdate",
]
