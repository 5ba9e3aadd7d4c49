"""Error taxonomy and the handlers that render every failure as an envelope."""

import asyncio
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "An unexpected error occurred"
RETRY_AFTER_SECONDS = 1


class TrackerError(Exception):
    status_code = 500
    retryable = False

    def __init__(self, message: str, data=None):
        super().__init__(message)
        self.message = message
        self.data = data


class InvalidRequestError(TrackerError):
    status_code = 400


class NotFoundError(TrackerError):
    status_code = 404


class ConflictError(TrackerError):
    status_code = 409


class StoreUnavailableError(TrackerError):
    """Connection loss or statement timeout. Safe for the caller to retry."""
    status_code = 500
    retryable = True


def is_unique_violation(exc: IntegrityError, table: str, column: str, constraint: Optional[str] = None) -> bool:
    """Match a unique-constraint failure on ``table.column``.

    SQLite reports the first column (``UNIQUE constraint failed: websites.domain``);
    PostgreSQL reports the constraint name, ``uq_<table>_<column>`` unless
    ``constraint`` names it.
    """
    message = str(exc.orig) if exc.orig is not None else str(exc)
    lowered = message.lower()
    if "unique" not in lowered and "duplicate" not in lowered:
        return False
    constraint = constraint or f"uq_{table}_{column}"
    return f"{table}.{column}" in lowered or constraint.lower() in lowered


def envelope(message: str, data=None, success: bool = False) -> dict:
    body = {"success": success, "message": message}
    if data is not None:
        body["data"] = data
    return body


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = [str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        parts.append(f"{field}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Invalid request"


def store_failure(exc: Exception) -> Optional[StoreUnavailableError]:
    """Classify transient store failures as retryable."""
    if isinstance(exc, StoreUnavailableError):
        return exc
    if isinstance(exc, (asyncio.TimeoutError, OperationalError)):
        return StoreUnavailableError("The database is temporarily unavailable, please retry")
    return None


def error_response(exc: TrackerError) -> JSONResponse:
    body = envelope(exc.message, exc.data)
    headers = None
    if exc.retryable:
        body["retryable"] = True
        headers = {"Retry-After": str(RETRY_AFTER_SECONDS)}
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TrackerError)
    async def tracker_error_handler(request: Request, exc: TrackerError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=envelope(_validation_message(exc)))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=envelope(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Database error on {request.method} {request.url.path}: {exc}")
        transient = store_failure(exc)
        if transient:
            return error_response(transient)
        return JSONResponse(status_code=500, content=envelope(GENERIC_FAILURE))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        transient = store_failure(exc)
        if transient:
            return error_response(transient)
        return JSONResponse(status_code=500, content=envelope(GENERIC_FAILURE))
