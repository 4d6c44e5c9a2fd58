"""Role endpoints. PATCH with permissions replaces the role's whole grant set."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from strongroom.api.v1.auth import require_permissions
from strongroom.api.v1.pagination import list_query_params
from strongroom.core.database import get_db
from strongroom.models.role import Action, Resource
from strongroom.schemas.auth import CurrentUser
from strongroom.schemas.pagination import Paginated
from strongroom.schemas.role import RoleCreate, RoleRead, RoleUpdate
from strongroom.services import roles as role_service
from strongroom.services.query import build_meta, compose_query

router = APIRouter()

CanCreate = Annotated[
    CurrentUser, Depends(require_permissions((Resource.PERMISSION, Action.CREATE)))
]
CanRead = Annotated[CurrentUser, Depends(require_permissions((Resource.PERMISSION, Action.READ)))]
CanUpdate = Annotated[
    CurrentUser, Depends(require_permissions((Resource.PERMISSION, Action.UPDATE)))
]
CanDelete = Annotated[
    CurrentUser, Depends(require_permissions((Resource.PERMISSION, Action.DELETE)))
]


@router.get("", response_model=Paginated[RoleRead])
def list_roles(
    params: Annotated[dict[str, Any], Depends(list_query_params)],
    db: Annotated[Session, Depends(get_db)],
    _user: CanRead,
) -> Paginated[RoleRead]:
    """List roles with their permissions; q searches the role name."""
    descriptor = compose_query(params, searchable_fields=role_service.ROLE_SEARCH_FIELDS)
    roles, total = role_service.list_roles(db, descriptor)
    return Paginated[RoleRead](
        data=[RoleRead.model_validate(r) for r in roles],
        meta=build_meta(descriptor.page, descriptor.take, total),
    )


@router.post("", response_model=RoleRead, status_code=status.HTTP_201_CREATED)
def create_role(
    body: RoleCreate,
    db: Annotated[Session, Depends(get_db)],
    _user: CanCreate,
) -> RoleRead:
    """
    Create a role. Each permission entry expands to one grant per action, e.g.
    {"resource": "USER", "action": ["READ", "UPDATE"]} yields two grants.
    """
    return RoleRead.model_validate(role_service.create_role(db, body))


@router.get("/{role_id}", response_model=RoleRead)
def get_role(
    role_id: str,
    db: Annotated[Session, Depends(get_db)],
    _user: CanRead,
) -> RoleRead:
    return RoleRead.model_validate(role_service.get_role(db, role_id))


@router.patch("/{role_id}", response_model=RoleRead)
def update_role(
    role_id: str,
    body: RoleUpdate,
    db: Annotated[Session, Depends(get_db)],
    _user: CanUpdate,
) -> RoleRead:
    return RoleRead.model_validate(role_service.update_role(db, role_id, body))


@router.delete("/{role_id}", response_model=RoleRead)
def delete_role(
    role_id: str,
    db: Annotated[Session, Depends(get_db)],
    _user: CanDelete,
) -> RoleRead:
    """Delete the role and its grants; returns the deleted role."""
    return RoleRead.model_validate(role_service.delete_role(db, role_id))
