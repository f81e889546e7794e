"""MinIO client utilities."""

from __future__ import annotations

from functools import lru_cache
from io import BytesIO

from minio import Minio
from minio.error import S3Error

from core import settings


@lru_cache
def get_minio_client() -> Minio:
    """Return a cached MinIO client configured from settings."""
    return Minio(
        settings.minio_endpoint,
        access_key=settings.minio_access_key,
        secret_key=settings.minio_secret_key,
        secure=settings.minio_secure,
    )


def ensure_bucket(client: Minio | None = None) -> None:
    """Ensure the configured bucket exists."""
    client = client or get_minio_client()
    bucket_name = settings.minio_bucket

    if client.bucket_exists(bucket_name):  # pragma: no cover - network call
        return

    try:
        client.make_bucket(bucket_name)  # pragma: no cover - network call
    except S3Error as exc:  # pragma: no cover - handle race conditions
        allowed_codes = {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}
        if exc.code not in allowed_codes:
            raise


def public_object_url(object_key: str) -> str:
    """Return the retrievable URL for an object in the configured bucket."""
    normalized_object_key = object_key.strip().lstrip("/")
    if not normalized_object_key:
        raise ValueError("object_key must not be empty")
    base_url = settings.media_public_base_url.rstrip("/")
    return f"{base_url}/{settings.minio_bucket}/{normalized_object_key}"


def upload_object(
    object_key: str,
    data: bytes,
    content_type: str,
    client: Minio | None = None,
) -> str:
    """Store ``data`` under ``object_key`` and return its public URL."""
    client = client or get_minio_client()
    ensure_bucket(client)
    client.put_object(
        settings.minio_bucket,
        object_key,
        data=BytesIO(data),
        length=len(data),
        content_type=content_type,
    )
    return public_object_url(object_key)


def delete_object(object_key: str, client: Minio | None = None) -> None:
    """Delete an object from the configured bucket when it exists."""
    client = client or get_minio_client()
    try:
        client.remove_object(settings.minio_bucket, object_key)  # pragma: no cover - network call
    except S3Error as exc:  # pragma: no cover - network call
        allowed_codes = {"NoSuchKey", "NoSuchObject", "ResourceNotFound"}
        if exc.code not in allowed_codes:
            raise
