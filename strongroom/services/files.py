"""
Stored files: object naming on upload, identifier resolution, and access URLs.

Object names are "{unix_ms}-{uuid4}-{sanitized original name}". A client identifier
resolves in order: exact object name (HEAD), the stored_files index (exact file id,
then substring of object name), then an optional linear scan of the bucket listing.
The first match wins; no match is a valid None result, not an error.
"""

import logging
import re
import time
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from strongroom.core.database import db_errors
from strongroom.core.errors import NotFoundError
from strongroom.models import StoredFile
from strongroom.schemas.file import FileRead
from strongroom.services.object_store import DEFAULT_CONTENT_TYPE, ObjectStat, ObjectStore

if TYPE_CHECKING:
    from strongroom.core.config import Settings

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9.-]")
_OBJECT_NAME_PATTERN = re.compile(
    r"^(?P<timestamp>\d+)-(?P<file_id>[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})-"
)


def sanitize_filename(original_name: str) -> str:
    """Replace every character outside [A-Za-z0-9.-] with '_'."""
    return _UNSAFE_NAME_CHARS.sub("_", original_name)


def generate_object_name(
    original_name: str,
    timestamp_ms: int | None = None,
    file_id: str | None = None,
) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    if file_id is None:
        file_id = str(uuid.uuid4())
    return f"{timestamp_ms}-{file_id}-{sanitize_filename(original_name)}"


def file_id_from_object_name(object_name: str) -> str | None:
    """UUID part of a generated object name, or None for names written out of band."""
    match = _OBJECT_NAME_PATTERN.match(object_name)
    return match.group("file_id") if match else None


class ObjectResolver:
    """Resolve a loosely-typed identifier to exactly one stored object, or None."""

    def __init__(
        self,
        store: ObjectStore,
        session: Session,
        prefix: str = "",
        fallback_scan: bool = True,
    ) -> None:
        self.store = store
        self.session = session
        self.prefix = prefix
        self.fallback_scan = fallback_scan

    def _index_candidates(self, identifier: str) -> list[str]:
        with db_errors(self.session, "look up file index"):
            exact = self.session.scalars(
                select(StoredFile.object_name)
                .where(StoredFile.file_id == identifier)
                .order_by(StoredFile.object_name)
            ).all()
            if exact:
                return list(exact)
            return list(
                self.session.scalars(
                    select(StoredFile.object_name)
                    .where(StoredFile.object_name.contains(identifier, autoescape=True))
                    .order_by(StoredFile.object_name)
                    .limit(10)
                ).all()
            )

    def _scan(self, identifier: str) -> ObjectStat | None:
        # O(number of objects); a key deleted mid-scan is skipped.
        for name in self.store.iter_names(self.prefix):
            if identifier in name:
                stat = self.store.stat(name)
                if stat is not None:
                    return stat
        return None

    def resolve(self, identifier: str) -> ObjectStat | None:
        if not identifier or not identifier.strip():
            return None
        stat = self.store.stat(identifier)
        if stat is not None:
            return stat
        for name in self._index_candidates(identifier):
            stat = self.store.stat(name)
            if stat is not None:
                return stat
            logger.warning("File index entry %s has no stored object", name)
        if self.fallback_scan:
            return self._scan(identifier)
        return None


def resolver_for(store: ObjectStore, session: Session, settings: "Settings") -> ObjectResolver:
    return ObjectResolver(
        store,
        session,
        prefix=settings.FILE_SEARCH_PREFIX,
        fallback_scan=settings.FILE_SEARCH_FALLBACK_SCAN,
    )


def access_url(
    store: ObjectStore,
    object_name: str,
    presigned: bool,
    expires_in: int,
) -> str:
    if presigned:
        return store.presigned_url(object_name, expires_in)
    return store.public_url(object_name)


def to_file_read(store: ObjectStore, stat: ObjectStat, url: str) -> FileRead:
    return FileRead(
        bucket=store.bucket,
        object_name=stat.object_name,
        etag=stat.etag,
        version_id=stat.version_id,
        size=stat.size,
        mimetype=stat.content_type,
        url=url,
    )


def upload_file(
    store: ObjectStore,
    session: Session,
    original_name: str,
    content: bytes,
    content_type: str | None,
    settings: "Settings",
) -> FileRead:
    """Store content under a generated name and record it in the identifier index."""
    file_id = str(uuid.uuid4())
    object_name = generate_object_name(original_name, file_id=file_id)
    content_type = content_type or DEFAULT_CONTENT_TYPE
    stat = store.put(
        object_name,
        content,
        content_type=content_type,
        # S3 user metadata must be ASCII.
        metadata={"original-name": sanitize_filename(original_name)},
    )
    with db_errors(session, "index uploaded file"):
        session.add(
            StoredFile(
                file_id=file_id,
                object_name=object_name,
                original_name=original_name[:512],
                content_type=content_type,
                size=stat.size,
            )
        )
        session.commit()
    logger.info("File uploaded successfully: %s", object_name)
    url = access_url(
        store,
        object_name,
        presigned=settings.FILE_URL_MODE == "presigned",
        expires_in=settings.PRESIGNED_URL_EXPIRE_SEC,
    )
    return to_file_read(store, stat, url)


def get_file(
    store: ObjectStore,
    session: Session,
    identifier: str,
    settings: "Settings",
    presigned: bool | None = None,
    expires_in: int | None = None,
) -> FileRead:
    """Resolve identifier and return metadata plus an access URL; NotFoundError if nothing matches."""
    stat = resolver_for(store, session, settings).resolve(identifier)
    if stat is None:
        raise NotFoundError(f"File not found with identifier: {identifier}")
    if presigned is None:
        presigned = settings.FILE_URL_MODE == "presigned"
    url = access_url(
        store,
        stat.object_name,
        presigned=presigned,
        expires_in=expires_in or settings.PRESIGNED_URL_EXPIRE_SEC,
    )
    return to_file_read(store, stat, url)


def delete_file(
    store: ObjectStore,
    session: Session,
    identifier: str,
    settings: "Settings",
) -> str:
    """Resolve and permanently delete one object; returns its name."""
    stat = resolver_for(store, session, settings).resolve(identifier)
    if stat is None:
        raise NotFoundError(f"File not found with identifier: {identifier}")
    store.delete(stat.object_name)
    with db_errors(session, "remove file index entry"):
        session.execute(delete(StoredFile).where(StoredFile.object_name == stat.object_name))
        session.commit()
    logger.info("File deleted successfully: %s", stat.object_name)
    return stat.object_name
