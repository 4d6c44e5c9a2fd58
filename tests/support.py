"""Shared test doubles: in-memory SQLite sessions and a dict-backed S3 client."""

import hashlib

from botocore.exceptions import ClientError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from strongroom.models import Base

BUCKET = "test-bucket"
BASE_URL = "http://localhost:9000"


def sqlite_session_factory() -> sessionmaker:
    """In-memory SQLite with all tables created; one connection shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class FakeS3Client:
    """Dict-backed subset of the boto3 S3 client used by ObjectStore."""

    def __init__(self) -> None:
        self.objects: dict[str, dict] = {}
        self.head_error: str | None = None

    def put_object(self, Bucket, Key, Body, ContentLength, ContentType, Metadata):
        etag = hashlib.md5(Body).hexdigest()
        self.objects[Key] = {"body": Body, "etag": etag, "type": ContentType, "meta": Metadata}
        return {"ETag": f'"{etag}"'}

    def head_object(self, Bucket, Key):
        if self.head_error is not None:
            raise client_error(self.head_error, "HeadObject")
        if Key not in self.objects:
            raise client_error("404", "HeadObject")
        obj = self.objects[Key]
        return {
            "ETag": f'"{obj["etag"]}"',
            "ContentLength": len(obj["body"]),
            "ContentType": obj["type"],
        }

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)
        return {}

    def get_paginator(self, operation_name):
        objects = self.objects

        class _Paginator:
            # Two keys per page so callers must walk every page.
            def paginate(self, Bucket, Prefix=""):
                keys = sorted(k for k in objects if k.startswith(Prefix))
                for start in range(0, max(len(keys), 1), 2):
                    yield {"Contents": [{"Key": k} for k in keys[start : start + 2]]}

        return _Paginator()

    def generate_presigned_url(self, ClientMethod, Params, ExpiresIn):
        return f"{BASE_URL}/{Params['Bucket']}/{Params['Key']}?X-Amz-Expires={ExpiresIn}"

    def head_bucket(self, Bucket):
        return {}
