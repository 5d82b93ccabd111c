"""S3-compatible object storage (AWS S3 or MinIO) backed by boto3."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, BinaryIO

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from inkwell.config import Settings, get_settings
from inkwell.services.errors import InternalError, NotFoundError

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 10  # seconds
READ_TIMEOUT = 30  # seconds
_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


class S3Storage:
    """Stores objects in one bucket. Paths are used as object keys."""

    def __init__(self, client: Any, bucket: str, public_base_url: str) -> None:
        self.client = client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> S3Storage:
        client = boto3.client(
            "s3",
            endpoint_url=settings.storage_endpoint_url or None,
            aws_access_key_id=settings.storage_access_key or None,
            aws_secret_access_key=settings.storage_secret_key or None,
            region_name=settings.storage_region,
            use_ssl=settings.storage_use_ssl,
            config=Config(
                connect_timeout=CONNECT_TIMEOUT,
                read_timeout=READ_TIMEOUT,
                retries={"max_attempts": 1},
                s3={"addressing_style": "path"},
            ),
        )
        base_url = settings.storage_public_base_url
        if not base_url:
            endpoint = (
                settings.storage_endpoint_url
                or f"https://s3.{settings.storage_region}.amazonaws.com"
            )
            base_url = f"{endpoint.rstrip('/')}/{settings.storage_bucket}"
        return cls(client, settings.storage_bucket, base_url)

    def url_for(self, path: str) -> str:
        return f"{self.public_base_url}/{path.lstrip('/')}"

    def save(self, path: str, stream: BinaryIO, content_type: str | None = None) -> str:
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self.client.put_object(Bucket=self.bucket, Key=path, Body=stream.read(), **extra)
        except (ClientError, BotoCoreError) as e:
            logger.error("Storage save failed: key=%s error=%s", path, e)
            raise InternalError("failed to store file") from e
        return self.url_for(path)

    def get(self, path: str) -> bytes:
        try:
            resp = self.client.get_object(Bucket=self.bucket, Key=path)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code", "") in _MISSING_CODES:
                raise NotFoundError("file not found") from e
            logger.error("Storage get failed: key=%s error=%s", path, e)
            raise InternalError("failed to read file") from e
        except BotoCoreError as e:
            logger.error("Storage get failed: key=%s error=%s", path, e)
            raise InternalError("failed to read file") from e
        return resp["Body"].read()

    def delete(self, path: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=path)
        except (ClientError, BotoCoreError) as e:
            logger.error("Storage delete failed: key=%s error=%s", path, e)
            raise InternalError("failed to delete file") from e


@lru_cache(maxsize=1)
def get_storage() -> S3Storage:
    """Return the process-wide storage client built from settings."""
    return S3Storage.from_settings(get_settings())
