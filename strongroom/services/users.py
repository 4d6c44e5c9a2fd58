"""User account operations on top of the soft-delete lifecycle."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import Session

from strongroom.core.database import db_errors
from strongroom.core.errors import ConflictError, NotFoundError
from strongroom.core.security import hash_password, verify_password
from strongroom.models import Role, User, UserStatus
from strongroom.schemas.user import UserCreate, UserUpdate
from strongroom.services.lifecycle import SoftDeleteLifecycle
from strongroom.services.query import QueryDescriptor, fetch_page

if TYPE_CHECKING:
    from strongroom.core.config import Settings

logger = logging.getLogger(__name__)

user_lifecycle: SoftDeleteLifecycle[User] = SoftDeleteLifecycle(User, label="User")

USER_SEARCH_FIELDS = ("email", "name")
USER_FILTER_FIELDS = {
    "status": lambda v: UserStatus(str(v).upper()),
    "role_id": str,
}


def _email_taken(
    session: Session,
    email: str,
    settings: "Settings",
    exclude_id: str | None = None,
) -> bool:
    """
    True if another row holds email.

    Unless EMAIL_REUSE_AFTER_SOFT_DELETE is set, soft-deleted rows count too.
    """
    stmt = select(User.id).where(User.email == email)
    if settings.EMAIL_REUSE_AFTER_SOFT_DELETE:
        stmt = stmt.where(User.deleted_at.is_(None))
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return session.scalar(stmt.limit(1)) is not None


def _require_role(session: Session, role_id: str) -> None:
    if session.get(Role, role_id) is None:
        raise NotFoundError(f"Role with ID {role_id} not found")


def create_user(session: Session, body: UserCreate, settings: "Settings") -> User:
    with db_errors(session, "create user"):
        if _email_taken(session, body.email, settings):
            raise ConflictError("User with this email already exists")
        if body.role_id is not None:
            _require_role(session, body.role_id)
        user = User(
            email=body.email,
            name=body.name,
            password_hash=hash_password(body.password),
            role_id=body.role_id,
        )
        session.add(user)
        session.commit()
    logger.info("User created: %s", user.id)
    return user


def list_users(session: Session, descriptor: QueryDescriptor) -> tuple[list[User], int]:
    """Page of live users matching descriptor, plus the total match count."""
    with db_errors(session, "fetch users"):
        return fetch_page(session, user_lifecycle.live_select(), User, descriptor)


def get_user(session: Session, user_id: str) -> User:
    with db_errors(session, "fetch user"):
        return user_lifecycle.get_live(session, user_id)


def find_user_by_email(session: Session, email: str) -> User | None:
    with db_errors(session, "fetch user"):
        stmt = user_lifecycle.live_select().where(User.email == email)
        return session.scalars(stmt).one_or_none()


def update_user(
    session: Session,
    user_id: str,
    body: UserUpdate,
    settings: "Settings",
) -> User:
    changes = body.model_dump(exclude_unset=True)
    with db_errors(session, "update user"):
        user = user_lifecycle.get_live(session, user_id)
        email = changes.get("email")
        if email is not None and email != user.email:
            if _email_taken(session, email, settings, exclude_id=user_id):
                raise ConflictError("Email already in use")
            user.email = email
        if "name" in changes:
            user.name = changes["name"]
        if changes.get("password"):
            user.password_hash = hash_password(changes["password"])
        if "role_id" in changes:
            if changes["role_id"] is not None:
                _require_role(session, changes["role_id"])
            user.role_id = changes["role_id"]
        session.commit()
    logger.info("User updated: %s", user_id)
    return user


def update_user_status(session: Session, user_id: str, status: UserStatus) -> User:
    """Any status may move to any other; the user must be live."""
    with db_errors(session, "update user status"):
        user = user_lifecycle.update_live(session, user_id, status=status)
    logger.info("User status updated: %s -> %s", user_id, status.value)
    return user


def soft_delete_user(session: Session, user_id: str) -> None:
    with db_errors(session, "delete user"):
        user_lifecycle.soft_delete(session, user_id)


def restore_user(session: Session, user_id: str, settings: "Settings") -> User:
    """
    Clear deleted_at. With EMAIL_REUSE_AFTER_SOFT_DELETE, fails with ConflictError when
    a live user has since registered the same email.
    """
    with db_errors(session, "restore user"):
        if settings.EMAIL_REUSE_AFTER_SOFT_DELETE:
            user = user_lifecycle.find_any(session, user_id)
            if (
                user is not None
                and user.deleted_at is not None
                and _email_taken(session, user.email, settings, exclude_id=user_id)
            ):
                raise ConflictError("Email already in use by another user")
        return user_lifecycle.restore(session, user_id)


def hard_delete_user(session: Session, user_id: str) -> None:
    with db_errors(session, "permanently delete user"):
        user_lifecycle.hard_delete(session, user_id)


def validate_credentials(session: Session, email: str, password: str) -> User | None:
    """Live user whose password matches, else None."""
    user = find_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user
