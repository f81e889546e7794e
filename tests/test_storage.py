"""Tests for MinIO storage helpers."""

from unittest.mock import MagicMock

import pytest

from services import storage


@pytest.fixture(autouse=True)
def _reset_cache():
    storage.get_minio_client.cache_clear()
    yield
    storage.get_minio_client.cache_clear()


class FakeS3Error(Exception):
    def __init__(self, code):
        super().__init__(code)
        self.code = code


def test_get_minio_client_is_built_once_from_settings(monkeypatch):
    mock_client = MagicMock(name="Minio")
    calls = []

    def fake_minio(endpoint, access_key, secret_key, secure):
        calls.append((endpoint, access_key, secret_key, secure))
        return mock_client

    monkeypatch.setattr(storage, "Minio", fake_minio)

    assert storage.get_minio_client() is mock_client
    assert storage.get_minio_client() is mock_client
    assert calls == [
        (
            storage.settings.minio_endpoint,
            storage.settings.minio_access_key,
            storage.settings.minio_secret_key,
            storage.settings.minio_secure,
        )
    ]


def test_ensure_bucket_creates_when_missing():
    client = MagicMock()
    client.bucket_exists.return_value = False

    storage.ensure_bucket(client)

    client.make_bucket.assert_called_once_with(storage.settings.minio_bucket)


def test_ensure_bucket_tolerates_concurrent_creation(monkeypatch):
    client = MagicMock()
    client.bucket_exists.return_value = False
    client.make_bucket.side_effect = FakeS3Error("BucketAlreadyOwnedByYou")
    monkeypatch.setattr(storage, "S3Error", FakeS3Error)

    storage.ensure_bucket(client)

    client.make_bucket.assert_called_once_with(storage.settings.minio_bucket)


def test_public_object_url_joins_base_bucket_and_key(monkeypatch):
    monkeypatch.setattr(storage.settings, "media_public_base_url", "https://cdn.example.com/")
    monkeypatch.setattr(storage.settings, "minio_bucket", "uploads")

    assert (
        storage.public_object_url("/posts/abc/photo.jpg")
        == "https://cdn.example.com/uploads/posts/abc/photo.jpg"
    )
    with pytest.raises(ValueError):
        storage.public_object_url("   ")


def test_upload_object_puts_bytes_and_returns_public_url():
    client = MagicMock()
    client.bucket_exists.return_value = True

    url = storage.upload_object("posts/u1/a.jpg", b"jpeg-bytes", "image/jpeg", client=client)

    assert url == storage.public_object_url("posts/u1/a.jpg")
    client.put_object.assert_called_once()
    args = client.put_object.call_args
    assert args.args[:2] == (storage.settings.minio_bucket, "posts/u1/a.jpg")
    assert args.kwargs["length"] == len(b"jpeg-bytes")
    assert args.kwargs["content_type"] == "image/jpeg"


def test_delete_object_ignores_missing_key_errors(monkeypatch):
    client = MagicMock()
    client.remove_object.side_effect = FakeS3Error("NoSuchKey")
    monkeypatch.setattr(storage, "S3Error", FakeS3Error)

    storage.delete_object("posts/missing.jpg", client)

    client.remove_object.assert_called_once_with(
        storage.settings.minio_bucket,
        "posts/missing.jpg",
    )


def test_delete_object_propagates_other_errors(monkeypatch):
    client = MagicMock()
    client.remove_object.side_effect = FakeS3Error("AccessDenied")
    monkeypatch.setattr(storage, "S3Error", FakeS3Error)

    with pytest.raises(FakeS3Error):
        storage.delete_object("posts/locked.jpg", client)
