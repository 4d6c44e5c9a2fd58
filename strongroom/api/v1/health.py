"""Liveness/readiness report covering the database and the object store bucket."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from strongroom.core.config import settings
from strongroom.core.database import check_db_connected, get_db
from strongroom.core.storage import get_object_store
from strongroom.schemas.health import HealthResponse
from strongroom.services.object_store import ObjectStore

router = APIRouter()


def _state(reachable: bool) -> str:
    return "connected" if reachable else "disconnected"


@router.get("/", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    store: Annotated[ObjectStore, Depends(get_object_store)],
) -> HealthResponse:
    """Always 200; status is 'degraded' when the database or bucket cannot be reached."""
    db_ok = check_db_connected(db)
    storage_ok = store.check_bucket()
    return HealthResponse(
        status="ok" if db_ok and storage_ok else "degraded",
        environment=settings.APP_ENV,
        database=_state(db_ok),
        storage=_state(storage_ok),
        bucket=store.bucket,
    )
