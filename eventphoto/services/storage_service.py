"""
Photo storage port and its backends.

A backend stores bytes and hands back a URL; it deletes by that same URL.
Every backend failure surfaces as UpstreamFailure. Which backend is used is
decided by STORAGE_BACKEND.
"""

from __future__ import annotations

import logging
import os
import uuid
from typing import Protocol

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from eventphoto.core.config import settings
from eventphoto.core.exceptions import UpstreamFailure

logger = logging.getLogger(__name__)

LOCAL_URL_PREFIX = "/media/"

CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/heic": "heic",
}


class StorageBackend(Protocol):
    def upload(self, data: bytes, path_hint: str, content_type: str) -> str:
        """Store data and return the URL it is reachable at."""
        ...

    def delete(self, url: str) -> None:
        """Remove the object behind a URL previously returned by upload."""
        ...


def build_storage_key(path_hint: str, content_type: str) -> str:
    """Unique object key under path_hint, e.g. events/<id>/photos/<uuid>.jpg."""
    ext = CONTENT_TYPE_EXTENSIONS.get(content_type, "bin")
    prefix = path_hint.strip("/")
    return f"{prefix}/{uuid.uuid4().hex}.{ext}"


# =============================================================================
# Local filesystem
# =============================================================================

class LocalStorage:
    """Files under LOCAL_STORAGE_PATH, served at /media/<key>."""

    def __init__(self, root: str | None = None):
        self.root = os.path.abspath(root or settings.LOCAL_STORAGE_PATH)

    def _path_for_key(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, key))
        if not path.startswith(self.root + os.sep):
            raise UpstreamFailure("Invalid storage key")
        return path

    def upload(self, data: bytes, path_hint: str, content_type: str) -> str:
        key = build_storage_key(path_hint, content_type)
        path = self._path_for_key(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.exception("Local storage write failed")
            raise UpstreamFailure("Failed to store file. Please try again.") from e
        return f"{LOCAL_URL_PREFIX}{key}"

    def delete(self, url: str) -> None:
        if not url.startswith(LOCAL_URL_PREFIX):
            raise UpstreamFailure("Not a local storage URL")
        path = self._path_for_key(url[len(LOCAL_URL_PREFIX):])
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise UpstreamFailure("Failed to delete stored file") from e


# =============================================================================
# S3 (and S3-compatible endpoints)
# =============================================================================

def get_s3_client() -> BaseClient:
    """S3 client with botocore standard retries (AWS_MAX_ATTEMPTS)."""
    endpoint_url = settings.S3_ENDPOINT_URL.rstrip("/") or None
    return boto3.client(
        "s3",
        region_name=settings.S3_REGION or None,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
        endpoint_url=endpoint_url,
        config=Config(retries={"mode": "standard", "max_attempts": settings.AWS_MAX_ATTEMPTS}),
    )


class S3Storage:
    def __init__(self, client: BaseClient | None = None, bucket: str | None = None):
        self.client = client or get_s3_client()
        self.bucket = bucket or settings.S3_BUCKET

    @property
    def base_url(self) -> str:
        if settings.S3_PUBLIC_BASE_URL:
            return settings.S3_PUBLIC_BASE_URL.rstrip("/")
        return f"https://{self.bucket}.s3.{settings.S3_REGION}.amazonaws.com"

    def _key_from_url(self, url: str) -> str:
        prefix = f"{self.base_url}/"
        if not url.startswith(prefix):
            raise UpstreamFailure("URL does not belong to the configured bucket")
        return url[len(prefix):]

    def upload(self, data: bytes, path_hint: str, content_type: str) -> str:
        key = build_storage_key(path_hint, content_type)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.exception("S3 upload failed")
            raise UpstreamFailure("Failed to store file. Please try again.") from e
        return f"{self.base_url}/{key}"

    def delete(self, url: str) -> None:
        key = self._key_from_url(url)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise UpstreamFailure("Failed to delete stored file") from e


def get_storage_backend() -> StorageBackend:
    backend = settings.STORAGE_BACKEND
    if backend == "s3":
        return S3Storage()
    if backend == "local":
        return LocalStorage()
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")
