"""ORM model for the stored-object identifier index."""

from sqlalchemy import BigInteger, Column, DateTime, String, func

from strongroom.models.base import Base, new_id, utcnow


class StoredFile(Base):
    """
    Index row written on upload so identifier lookups avoid a bucket listing scan.

    file_id is the UUID embedded in object_name; the object store remains the source
    of truth for content and metadata.
    """

    __tablename__ = "stored_files"

    id = Column(String(36), primary_key=True, default=new_id)
    file_id = Column(String(36), nullable=False, index=True)
    object_name = Column(String(1024), nullable=False, unique=True, index=True)
    original_name = Column(String(512), nullable=False, default="")
    content_type = Column(String(255), nullable=False, default="application/octet-stream")
    size = Column(BigInteger, nullable=False, default=0)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
