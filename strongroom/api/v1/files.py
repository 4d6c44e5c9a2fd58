"""File endpoints: multipart upload, lookup by name or id fragment, delete."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from strongroom.api.v1.auth import require_permissions
from strongroom.core.config import MAX_PRESIGNED_EXPIRE_SEC, Settings, get_settings
from strongroom.core.database import get_db
from strongroom.core.storage import get_object_store
from strongroom.models.role import Action, Resource
from strongroom.schemas.auth import CurrentUser
from strongroom.schemas.file import FileRead
from strongroom.services import files as file_service
from strongroom.services.object_store import ObjectStore

router = APIRouter()

CanCreate = Annotated[CurrentUser, Depends(require_permissions((Resource.FILE, Action.CREATE)))]
CanRead = Annotated[CurrentUser, Depends(require_permissions((Resource.FILE, Action.READ)))]
CanDelete = Annotated[CurrentUser, Depends(require_permissions((Resource.FILE, Action.DELETE)))]


@router.post("/upload", response_model=FileRead, status_code=status.HTTP_201_CREATED)
def upload_file(
    file: Annotated[UploadFile, File(description="File to upload")],
    db: Annotated[Session, Depends(get_db)],
    store: Annotated[ObjectStore, Depends(get_object_store)],
    settings: Annotated[Settings, Depends(get_settings)],
    _user: CanCreate,
) -> FileRead:
    """
    Upload a file (multipart/form-data, field `file`).

    The object name is generated as `{unix_ms}-{uuid}-{sanitized name}`; the response
    carries bucket, object name, etag, version id, size, MIME type and access URL.
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Multipart request must include a 'file' field with a filename.",
        )
    content = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size must not exceed {settings.MAX_UPLOAD_BYTES} bytes.",
        )
    return file_service.upload_file(
        store,
        db,
        original_name=file.filename,
        content=content,
        content_type=file.content_type,
        settings=settings,
    )


@router.get("/{identifier}", response_model=FileRead)
def get_file(
    identifier: str,
    db: Annotated[Session, Depends(get_db)],
    store: Annotated[ObjectStore, Depends(get_object_store)],
    settings: Annotated[Settings, Depends(get_settings)],
    _user: CanRead,
    presigned: Annotated[
        bool | None,
        Query(description="Return a time-limited presigned URL instead of the public URL"),
    ] = None,
    expires_in: Annotated[
        int | None,
        Query(alias="expiresIn", ge=1, le=MAX_PRESIGNED_EXPIRE_SEC, description="Presigned URL lifetime (s)"),
    ] = None,
) -> FileRead:
    """
    Get file metadata by exact object name, or by a fragment of it (UUID or timestamp).
    404 when nothing matches.
    """
    return file_service.get_file(
        store,
        db,
        identifier,
        settings,
        presigned=presigned,
        expires_in=expires_in,
    )


@router.delete("/{identifier}", status_code=status.HTTP_204_NO_CONTENT)
def delete_file(
    identifier: str,
    db: Annotated[Session, Depends(get_db)],
    store: Annotated[ObjectStore, Depends(get_object_store)],
    settings: Annotated[Settings, Depends(get_settings)],
    _user: CanDelete,
) -> None:
    """Delete a file by exact object name or fragment. Immediate and irreversible."""
    file_service.delete_file(store, db, identifier, settings)
