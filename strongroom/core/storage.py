"""S3-compatible object store client construction and bucket bootstrap."""

import json
import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Request

from strongroom.core.config import Settings
from strongroom.core.errors import StorageError
from strongroom.services.object_store import ObjectStore

logger = logging.getLogger(__name__)


def endpoint_url(settings: Settings) -> str:
    """Scheme, host and port of the object store (no trailing slash)."""
    scheme = "https" if settings.S3_USE_SSL else "http"
    return f"{scheme}://{settings.S3_ENDPOINT}:{settings.S3_PORT}"


def create_s3_client(settings: Settings) -> Any:
    """Build the process-wide boto3 S3 client. Path-style addressing works with MinIO."""
    return boto3.client(
        "s3",
        endpoint_url=endpoint_url(settings),
        region_name=settings.S3_REGION,
        aws_access_key_id=settings.S3_ACCESS_KEY,
        aws_secret_access_key=settings.S3_SECRET_KEY.get_secret_value(),
        config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
    )


def public_read_policy(bucket: str) -> dict[str, Any]:
    """Bucket policy allowing anonymous GET on every object."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"AWS": ["*"]},
                "Action": ["s3:GetObject"],
                "Resource": [f"arn:aws:s3:::{bucket}/*"],
            }
        ],
    }


def ensure_bucket(client: Any, settings: Settings) -> None:
    """
    Create the bucket when missing and, if S3_PUBLIC_READ, apply the public-read policy.

    Raises StorageError when the store is unreachable or the bucket cannot be created.
    A failure to set the policy is logged and tolerated; presigned URLs still work.
    """
    bucket = settings.S3_BUCKET_NAME
    try:
        try:
            client.head_bucket(Bucket=bucket)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code not in ("404", "NoSuchBucket", "NotFound"):
                raise
            client.create_bucket(Bucket=bucket)
            logger.info("Bucket '%s' created", bucket)
    except (ClientError, BotoCoreError) as e:
        logger.exception("Failed to initialize bucket '%s'", bucket)
        raise StorageError(f"Failed to initialize storage bucket: {e}") from e

    if not settings.S3_PUBLIC_READ:
        return
    try:
        client.put_bucket_policy(Bucket=bucket, Policy=json.dumps(public_read_policy(bucket)))
        logger.debug("Public policy set for bucket '%s'", bucket)
    except (ClientError, BotoCoreError) as e:
        logger.warning("Failed to set bucket policy on '%s': %s", bucket, e)


def create_object_store(client: Any, settings: Settings) -> ObjectStore:
    return ObjectStore(
        client,
        bucket=settings.S3_BUCKET_NAME,
        public_base_url=endpoint_url(settings),
    )


def get_object_store(request: Request) -> ObjectStore:
    """Dependency: the object store bound at startup."""
    return request.app.state.object_store
