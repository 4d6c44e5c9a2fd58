"""Response schema for stored objects."""

from pydantic import Field

from strongroom.schemas.common import APIModel


class FileRead(APIModel):
    """Metadata and access URL of one stored object."""

    bucket: str
    object_name: str
    etag: str
    version_id: str | None = None
    size: int = Field(..., ge=0)
    mimetype: str
    url: str
