"""User endpoints: CRUD plus soft delete, restore, permanent delete and status updates."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from strongroom.api.v1.auth import require_permissions
from strongroom.api.v1.pagination import list_query_params
from strongroom.core.config import Settings, get_settings
from strongroom.core.database import get_db
from strongroom.models.role import Action, Resource
from strongroom.schemas.auth import CurrentUser
from strongroom.schemas.pagination import Paginated
from strongroom.schemas.user import UserCreate, UserRead, UserStatusUpdate, UserUpdate
from strongroom.services import users as user_service
from strongroom.services.query import build_meta, compose_query

router = APIRouter()

CanCreate = Annotated[CurrentUser, Depends(require_permissions((Resource.USER, Action.CREATE)))]
CanRead = Annotated[CurrentUser, Depends(require_permissions((Resource.USER, Action.READ)))]
CanUpdate = Annotated[CurrentUser, Depends(require_permissions((Resource.USER, Action.UPDATE)))]
CanDelete = Annotated[CurrentUser, Depends(require_permissions((Resource.USER, Action.DELETE)))]


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    _user: CanCreate,
) -> UserRead:
    """Register a user. 409 if the email is already taken."""
    user = user_service.create_user(db, body, settings)
    return UserRead.model_validate(user)


@router.get("", response_model=Paginated[UserRead])
def list_users(
    params: Annotated[dict[str, Any], Depends(list_query_params)],
    db: Annotated[Session, Depends(get_db)],
    _user: CanRead,
    status_filter: Annotated[
        str | None, Query(alias="status", description="Filter by user status")
    ] = None,
    role_id: Annotated[str | None, Query(alias="roleId", description="Filter by role")] = None,
) -> Paginated[UserRead]:
    """
    List live users with pagination.

    Search (q) matches email or name, case-insensitive. Soft-deleted users are never listed.
    """
    descriptor = compose_query(
        {**params, "status": status_filter, "role_id": role_id},
        searchable_fields=user_service.USER_SEARCH_FIELDS,
        filterable_fields=user_service.USER_FILTER_FIELDS,
    )
    users, total = user_service.list_users(db, descriptor)
    return Paginated[UserRead](
        data=[UserRead.model_validate(u) for u in users],
        meta=build_meta(descriptor.page, descriptor.take, total),
    )


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: str,
    db: Annotated[Session, Depends(get_db)],
    _user: CanRead,
) -> UserRead:
    return UserRead.model_validate(user_service.get_user(db, user_id))


@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    user_id: str,
    body: UserUpdate,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    _user: CanUpdate,
) -> UserRead:
    user = user_service.update_user(db, user_id, body, settings)
    return UserRead.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def soft_delete_user(
    user_id: str,
    db: Annotated[Session, Depends(get_db)],
    _user: CanDelete,
) -> None:
    """Soft delete: the user disappears from reads but can be restored."""
    user_service.soft_delete_user(db, user_id)


@router.patch("/{user_id}/restore", response_model=UserRead)
def restore_user(
    user_id: str,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    _user: CanUpdate,
) -> UserRead:
    """Undo a soft delete. 404 if the user never existed, 409 if it is not deleted."""
    return UserRead.model_validate(user_service.restore_user(db, user_id, settings))


@router.delete("/{user_id}/force", status_code=status.HTTP_204_NO_CONTENT)
def hard_delete_user(
    user_id: str,
    db: Annotated[Session, Depends(get_db)],
    _user: CanDelete,
) -> None:
    """Permanently remove the user, whether live or soft-deleted. Irreversible."""
    user_service.hard_delete_user(db, user_id)


@router.patch("/{user_id}/status", response_model=UserRead)
def update_user_status(
    user_id: str,
    body: UserStatusUpdate,
    db: Annotated[Session, Depends(get_db)],
    _user: CanUpdate,
) -> UserRead:
    return UserRead.model_validate(user_service.update_user_status(db, user_id, body.status))
