"""Upload reading and image normalization."""

from __future__ import annotations

from io import BytesIO

from fastapi import UploadFile
from PIL import Image, ImageOps, UnidentifiedImageError

JPEG_CONTENT_TYPE = "image/jpeg"
MAX_IMAGE_DIMENSION = 1080
JPEG_QUALITY = 85
READ_CHUNK_SIZE = 64 * 1024


class UploadTooLargeError(ValueError):
    """Raised when an upload exceeds the configured byte limit."""


async def read_upload_file(upload: UploadFile, max_bytes: int) -> bytes:
    """Read an upload in chunks, refusing anything larger than ``max_bytes``."""
    buffer = bytearray()
    while True:
        chunk = await upload.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            limit_mb = max_bytes / (1024 * 1024)
            raise UploadTooLargeError(f"Image must be at most {limit_mb:g}MB")
    return bytes(buffer)


def process_image_bytes(data: bytes) -> tuple[bytes, str]:
    """Decode, orient, downscale and re-encode an image as JPEG.

    Raises ``ValueError`` when ``data`` is empty or not a decodable image.
    """
    if not data:
        raise ValueError("Image file is required")

    try:
        with Image.open(BytesIO(data)) as candidate:
            candidate.verify()
        with Image.open(BytesIO(data)) as source:
            image = ImageOps.exif_transpose(source)
            image.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise ValueError("Uploaded file is not a valid image") from exc

    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    image.thumbnail((MAX_IMAGE_DIMENSION, MAX_IMAGE_DIMENSION))

    output = BytesIO()
    image.save(output, format="JPEG", quality=JPEG_QUALITY, optimize=True)
    return output.getvalue(), JPEG_CONTENT_TYPE
