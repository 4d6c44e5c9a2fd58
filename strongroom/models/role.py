"""ORM models for roles and their permission grants."""

import enum

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from strongroom.models.base import Base, new_id, utcnow


class Resource(str, enum.Enum):
    USER = "USER"
    PERMISSION = "PERMISSION"
    FILE = "FILE"


class Action(str, enum.Enum):
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Role(Base):
    """Named permission bundle. Grants are cascade-deleted with the role."""

    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False, unique=True, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    permissions = relationship(
        "RolePermission",
        back_populates="role",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by=lambda: (RolePermission.resource, RolePermission.action),
    )


class RolePermission(Base):
    """One (resource, action) grant owned by a role; never created standalone."""

    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "resource", "action", name="uq_role_permissions_grant"),
        Index("ix_role_permissions_resource_action", "resource", "action"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    role_id = Column(
        String(36),
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    resource = Column(Enum(Resource, name="permission_resource"), nullable=False)
    action = Column(Enum(Action, name="permission_action"), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    role = relationship("Role", back_populates="permissions")
