# =============================================================================
# app/exceptions.py - Error taxonomy and exception handlers
# =============================================================================
# Stores and services raise these exceptions; the handlers registered in
# main.py turn them into JSON error bodies at the HTTP boundary.
# =============================================================================

import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class MediaLibraryException(Exception):
    """
    Base exception for the media library.

    Carries an HTTP status and a machine-readable code so the boundary can
    render every failure the same way.
    """

    def __init__(
        self,
        message: str,
        code: str = "MEDIA_LIBRARY_ERROR",
        status_code: int = 500,
        details: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict:
        """Convert exception to API response dict."""
        result = {
            "error": self.message,
            "code": self.code,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(MediaLibraryException):
    """Malformed or missing input."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400, details=details)


class ConflictError(MediaLibraryException):
    """Uniqueness violation."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, code="CONFLICT", status_code=409, details=details)


class ForbiddenError(MediaLibraryException):
    """Mutation of a protected entity."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, code="FORBIDDEN", status_code=403, details=details)


class NotFoundError(MediaLibraryException):
    """The target of an operation does not exist."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class StorageError(MediaLibraryException):
    """The object store failed or refused a request."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, code="STORAGE_ERROR", status_code=500, details=details)


class PersistenceError(MediaLibraryException):
    """The database failed."""

    def __init__(self, message: str = "Database operation failed.", details: Optional[Any] = None):
        super().__init__(message, code="PERSISTENCE_ERROR", status_code=500, details=details)


# =============================================================================
# Exception Handlers
# =============================================================================

async def media_library_exception_handler(
    request: Request,
    exc: MediaLibraryException
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_dict())
    )


async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors.

    Every issue is reported with its location, message and type so a client
    can point at the offending field.
    """
    issues = [
        {
            "loc": list(error.get("loc", ())),
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder(
            ValidationError("Invalid request body", details=issues).to_dict()
        )
    )


async def sqlalchemy_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    logger.exception(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content=PersistenceError().to_dict()
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR"}
    )
