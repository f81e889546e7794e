"""Business logic services."""

from .errors import (
    Conflict,
    Forbidden,
    InvalidInput,
    NotFound,
    ServiceError,
    StoreUnavailable,
    Unauthorized,
)
from .images import (
    JPEG_CONTENT_TYPE,
    MAX_IMAGE_DIMENSION,
    UploadTooLargeError,
    process_image_bytes,
    read_upload_file,
)
from .rate_limiter import (
    RateLimitMiddleware,
    RateLimiter,
    get_rate_limiter,
    set_rate_limiter,
)
from .storage import (
    delete_object,
    ensure_bucket,
    get_minio_client,
    public_object_url,
    upload_object,
)

__all__ = [
    "ServiceError",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "InvalidInput",
    "Conflict",
    "StoreUnavailable",
    "get_minio_client",
    "ensure_bucket",
    "upload_object",
    "delete_object",
    "public_object_url",
    "process_image_bytes",
    "read_upload_file",
    "MAX_IMAGE_DIMENSION",
    "JPEG_CONTENT_TYPE",
    "UploadTooLargeError",
    "RateLimiter",
    "RateLimitMiddleware",
    "get_rate_limiter",
    "set_rate_limiter",
]
