"""SQLAlchemy ORM models."""

from strongroom.models.base import Base
from strongroom.models.role import Action, Resource, Role, RolePermission
from strongroom.models.stored_file import StoredFile
from strongroom.models.user import User, UserStatus

__all__ = [
    "Action",
    "Base",
    "Resource",
    "Role",
    "RolePermission",
    "StoredFile",
    "User",
    "UserStatus",
]
