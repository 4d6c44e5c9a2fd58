"""Object-store collaborator: put/stat/delete/list/presign against one S3 bucket."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from botocore.exceptions import BotoCoreError, ClientError

from strongroom.core.errors import StorageError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Error codes S3/MinIO return for a missing key on HEAD/GET.
_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


@dataclass(frozen=True)
class ObjectStat:
    """Metadata of one stored object as reported by the store."""

    object_name: str
    etag: str
    size: int
    content_type: str = DEFAULT_CONTENT_TYPE
    version_id: str | None = None


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _clean_etag(etag: str | None) -> str:
    # S3 returns the ETag wrapped in double quotes.
    return (etag or "").strip('"')


class ObjectStore:
    """
    Thin wrapper over a boto3 S3 client bound to a single bucket.

    Every transport or backend failure is raised as StorageError; a missing key is
    reported as None/False, never as an error.
    """

    def __init__(self, client: Any, bucket: str, public_base_url: str) -> None:
        self._client = client
        self.bucket = bucket
        self._public_base_url = public_base_url.rstrip("/")

    def put(
        self,
        object_name: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> ObjectStat:
        try:
            response = self._client.put_object(
                Bucket=self.bucket,
                Key=object_name,
                Body=body,
                ContentLength=len(body),
                ContentType=content_type,
                Metadata=metadata or {},
            )
        except (ClientError, BotoCoreError) as e:
            logger.exception("Failed to put object %s", object_name)
            raise StorageError(f"Failed to upload object {object_name}: {e}") from e
        return ObjectStat(
            object_name=object_name,
            etag=_clean_etag(response.get("ETag")),
            size=len(body),
            content_type=content_type,
            version_id=response.get("VersionId"),
        )

    def stat(self, object_name: str) -> ObjectStat | None:
        """HEAD the object; None when the key does not exist."""
        try:
            response = self._client.head_object(Bucket=self.bucket, Key=object_name)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return None
            logger.exception("Failed to stat object %s", object_name)
            raise StorageError(f"Failed to stat object {object_name}: {e}") from e
        except BotoCoreError as e:
            logger.exception("Failed to stat object %s", object_name)
            raise StorageError(f"Failed to stat object {object_name}: {e}") from e
        return ObjectStat(
            object_name=object_name,
            etag=_clean_etag(response.get("ETag")),
            size=int(response.get("ContentLength", 0)),
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE,
            version_id=response.get("VersionId"),
        )

    def exists(self, object_name: str) -> bool:
        return self.stat(object_name) is not None

    def delete(self, object_name: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=object_name)
        except (ClientError, BotoCoreError) as e:
            logger.exception("Failed to delete object %s", object_name)
            raise StorageError(f"Failed to delete object {object_name}: {e}") from e

    def iter_names(self, prefix: str = "") -> Iterator[str]:
        """Yield every object name in the bucket under prefix, page by page."""
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for item in page.get("Contents", []):
                    yield item["Key"]
        except (ClientError, BotoCoreError) as e:
            logger.exception("Failed to list objects under prefix %r", prefix)
            raise StorageError(f"Failed to list objects: {e}") from e

    def public_url(self, object_name: str) -> str:
        """Permanent URL; resolves only when the bucket allows anonymous reads."""
        return f"{self._public_base_url}/{self.bucket}/{quote(object_name, safe='/')}"

    def presigned_url(self, object_name: str, expires_in: int) -> str:
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": object_name},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            logger.exception("Failed to generate presigned URL for %s", object_name)
            raise StorageError(f"Failed to generate file access URL: {e}") from e

    def check_bucket(self) -> bool:
        """True when the bucket is reachable with the configured credentials."""
        try:
            self._client.head_bucket(Bucket=self.bucket)
            return True
        except (ClientError, BotoCoreError):
            return False
