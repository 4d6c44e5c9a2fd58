"""Health report schema."""

from typing import Literal

from pydantic import BaseModel, Field

DependencyState = Literal["connected", "disconnected"]


class HealthResponse(BaseModel):
    """Service status plus reachability of the database and the storage bucket."""

    status: Literal["ok", "degraded"] = Field(
        default="ok", description="'degraded' when any dependency is unreachable"
    )
    environment: str = Field(description="APP_ENV of the running process")
    database: DependencyState
    storage: DependencyState
    bucket: str = Field(description="Bucket the object store is bound to")
