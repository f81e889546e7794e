"""Shared helpers for API tests."""

from io import BytesIO
from typing import Any

from httpx import AsyncClient
from jose import jwt
from PIL import Image

from core.config import settings


class DummyMinio:
    """Records uploads and removals instead of talking to MinIO."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.removed: list[str] = []
        self.fail_put = False
        self.fail_remove = False

    def bucket_exists(self, bucket_name: str) -> bool:
        return True

    def make_bucket(self, bucket_name: str) -> None:
        return None

    def put_object(self, bucket_name, object_name, data, length, content_type=None):
        if self.fail_put:
            raise RuntimeError("storage offline")
        self.objects[object_name] = data.read()

    def remove_object(self, bucket_name, object_name):
        if self.fail_remove:
            raise RuntimeError("storage offline")
        self.removed.append(object_name)
        self.objects.pop(object_name, None)


def make_token(subject: str, **claims: Any) -> str:
    """Sign a session token the way the identity provider would."""
    payload: dict[str, Any] = {"sub": subject, **claims}
    return jwt.encode(payload, settings.auth_jwt_key, algorithm=settings.auth_jwt_algorithms[0])


def auth_headers(subject: str, **claims: Any) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(subject, **claims)}"}


def make_image_bytes(size: tuple[int, int] = (1200, 800), image_format: str = "PNG") -> bytes:
    image = Image.new("RGB", size, color=(0, 200, 100))
    buffer = BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


async def sync_account(
    client: AsyncClient,
    subject: str,
    display_name: str | None = None,
) -> dict[str, Any]:
    """Create the account for ``subject`` and return its JSON form."""
    body = {"displayName": display_name} if display_name is not None else {}
    response = await client.post("/api/users/sync", json=body, headers=auth_headers(subject))
    assert response.status_code == 200, response.text
    return response.json()["user"]


async def create_post_via_api(
    client: AsyncClient,
    subject: str,
    caption: str | None = None,
) -> dict[str, Any]:
    files = {"image": ("photo.png", make_image_bytes(), "image/png")}
    data = {"caption": caption} if caption is not None else {}
    response = await client.post(
        "/api/posts",
        data=data,
        files=files,
        headers=auth_headers(subject),
    )
    assert response.status_code == 201, response.text
    return response.json()["post"]
