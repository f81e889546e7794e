"""Service-level error taxonomy.

Services raise these instead of ``HTTPException`` so the same rules apply no
matter which endpoint triggers them. ``app.create_app`` installs the handler
that renders them as ``{"detail", "reason", **extra}`` JSON bodies.
"""

from __future__ import annotations

from typing import Any

from fastapi import status


class ServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    reason: str = "internal_error"
    default_detail: str = "Internal server error"

    def __init__(
        self,
        detail: str | None = None,
        *,
        reason: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.detail = detail or self.default_detail
        if reason is not None:
            self.reason = reason
        self.extra = dict(extra or {})
        super().__init__(self.detail)

    def to_payload(self) -> dict[str, Any]:
        return {"detail": self.detail, "reason": self.reason, **self.extra}


class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    reason = "unauthorized"
    default_detail = "Unauthorized"


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    reason = "forbidden"
    default_detail = "Forbidden"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    reason = "not_found"
    default_detail = "Not found"


class InvalidInput(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    reason = "invalid_input"
    default_detail = "Invalid input"


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    reason = "conflict"
    default_detail = "Already in requested state"


class StoreUnavailable(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    reason = "store_unavailable"
    default_detail = "Storage backend unavailable"


__all__ = [
    "ServiceError",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "InvalidInput",
    "Conflict",
    "StoreUnavailable",
]
