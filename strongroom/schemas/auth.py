"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, Field

from strongroom.models.role import Action, Resource


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=3, max_length=255, description="Email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class TokenResponse(BaseModel):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class CurrentUser(BaseModel):
    """Authenticated caller and the (resource, action) grants of their role."""

    id: str
    email: str
    role_id: str | None = None
    permissions: frozenset[tuple[Resource, Action]] = frozenset()
    superuser: bool = False
