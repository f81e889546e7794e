"""Exception handlers rendering service errors as JSON."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from services.errors import InvalidInput, ServiceError, StoreUnavailable

logger = logging.getLogger(__name__)


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return InvalidInput.default_detail
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", InvalidInput.default_detail)
    return f"{location}: {message}" if location else message


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "Request failed: %s",
            exc.detail,
            extra={"path": request.url.path, "reason": exc.reason},
        )
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = InvalidInput(_first_validation_message(exc))
    return JSONResponse(error.to_payload(), status_code=error.status_code)


async def store_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled database error",
        extra={"path": request.url.path},
        exc_info=exc,
    )
    error = StoreUnavailable()
    return JSONResponse(error.to_payload(), status_code=error.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
