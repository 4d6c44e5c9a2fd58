"""Role operations. Permission updates replace the full grant set; they never merge."""

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from strongroom.core.database import db_errors
from strongroom.core.errors import ConflictError, NotFoundError
from strongroom.models import Action, Resource, Role, RolePermission
from strongroom.models.base import utcnow
from strongroom.schemas.role import PermissionSpec, RoleCreate, RoleUpdate
from strongroom.services.query import QueryDescriptor, fetch_page

logger = logging.getLogger(__name__)

ROLE_SEARCH_FIELDS = ("name",)


def expand_grants(specs: Iterable[PermissionSpec]) -> list[tuple[Resource, Action]]:
    """Flatten resource -> [actions] into distinct (resource, action) pairs, order kept."""
    grants: list[tuple[Resource, Action]] = []
    seen: set[tuple[Resource, Action]] = set()
    for spec in specs:
        for action in spec.action:
            pair = (spec.resource, action)
            if pair not in seen:
                seen.add(pair)
                grants.append(pair)
    return grants


def _name_taken(session: Session, name: str, exclude_id: str | None = None) -> bool:
    stmt = select(Role.id).where(Role.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Role.id != exclude_id)
    return session.scalar(stmt.limit(1)) is not None


def _get_role(session: Session, role_id: str) -> Role:
    role = session.get(Role, role_id)
    if role is None:
        raise NotFoundError(f"Role with ID {role_id} not found")
    return role


def list_roles(session: Session, descriptor: QueryDescriptor) -> tuple[list[Role], int]:
    with db_errors(session, "fetch roles"):
        return fetch_page(session, select(Role), Role, descriptor)


def get_role(session: Session, role_id: str) -> Role:
    with db_errors(session, "fetch role"):
        return _get_role(session, role_id)


def create_role(session: Session, body: RoleCreate) -> Role:
    """Create the role and its grants in one transaction."""
    with db_errors(session, "create role"):
        if _name_taken(session, body.name):
            raise ConflictError(f"Role '{body.name}' already exists")
        role = Role(name=body.name)
        role.permissions = [
            RolePermission(resource=resource, action=action)
            for resource, action in expand_grants(body.permissions or [])
        ]
        session.add(role)
        session.commit()
    logger.info("Role created: %s (%d grants)", role.id, len(role.permissions))
    return role


def update_role(session: Session, role_id: str, body: RoleUpdate) -> Role:
    """
    Rename and/or replace grants. When permissions is given, every existing grant is
    deleted and the submitted set recreated, all in one transaction.
    """
    with db_errors(session, "update role"):
        role = _get_role(session, role_id)
        if body.name is not None and body.name != role.name:
            if _name_taken(session, body.name, exclude_id=role_id):
                raise ConflictError(f"Role '{body.name}' already exists")
            role.name = body.name
        if body.permissions is not None:
            role.permissions.clear()
            # Deletes must reach the database before re-inserting the same grant.
            session.flush()
            role.permissions.extend(
                RolePermission(resource=resource, action=action)
                for resource, action in expand_grants(body.permissions)
            )
            role.updated_at = utcnow()
        session.commit()
    logger.info("Role updated: %s", role_id)
    return role


def delete_role(session: Session, role_id: str) -> Role:
    """Delete the role; its grants go with it. Returns the deleted role as it was."""
    with db_errors(session, "delete role"):
        role = _get_role(session, role_id)
        # Load grants before the row disappears so the caller can echo them.
        _ = list(role.permissions)
        session.delete(role)
        session.commit()
    logger.info("Role deleted: %s", role_id)
    return role
