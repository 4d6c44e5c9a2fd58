"""JWT login and auth dependencies (get_current_user, require_permissions)."""

import logging
from collections.abc import Callable
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from strongroom.core.config import settings
from strongroom.core.database import db_errors, get_db
from strongroom.core.security import create_access_token, decode_access_token
from strongroom.models import UserStatus
from strongroom.models.role import Action, Resource
from strongroom.schemas.auth import CurrentUser, LoginRequest, TokenResponse
from strongroom.services.authorization import granted_permissions, missing_permissions
from strongroom.services.users import user_lifecycle, validate_credentials

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)

# Returned by get_current_user when AUTH_ENABLED is False.
ANONYMOUS_SUPERUSER = CurrentUser(id="anonymous", email="anonymous@localhost", superuser=True)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    user = validate_credentials(db, body.email, body.password)
    if user is None:
        raise _unauthorized("Invalid email or password.")
    if user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not active.",
        )
    token = create_access_token(user.id, user.role_id, settings)
    return TokenResponse(access_token=token, token_type="bearer")


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require valid Bearer JWT for a live, ACTIVE user. Raises 401/403 otherwise."""
    if not settings.AUTH_ENABLED:
        return ANONYMOUS_SUPERUSER
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        claims = decode_access_token(credentials.credentials, settings)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    with db_errors(db, "fetch current user"):
        user = user_lifecycle.find_live(db, claims.user_id)
    if user is None:
        raise _unauthorized("User not found")
    if user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not active",
        )
    return CurrentUser(
        id=user.id,
        email=user.email,
        role_id=user.role_id,
        permissions=granted_permissions(user),
    )


def require_permissions(
    *required: tuple[Resource, Action],
) -> Callable[[CurrentUser], CurrentUser]:
    """Dependency factory: the caller must hold every (resource, action) pair. Raises 403 otherwise."""

    def dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if current_user.superuser:
            return current_user
        missing = missing_permissions(current_user.permissions, required)
        if missing:
            logger.info(
                "Permission denied for user %s: missing %s",
                current_user.id,
                ", ".join(f"{r.value}:{a.value}" for r, a in missing),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return dependency
