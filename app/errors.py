"""Error taxonomy shared by every endpoint.

Each error kind carries a fixed HTTP status and a machine-readable type tag.
Anything raised that is not an ``ApiError`` is reported as an internal server
error.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorType(str, Enum):
    INVALID_PARAMETER = "INVALID_PARAMETER"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class ApiError(Exception):
    """Base error for failures that map onto an HTTP response."""

    status_code: int = 500
    error_type: ErrorType = ErrorType.INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidParameterError(ApiError):
    """Raised when a request body or query string fails validation."""

    status_code = 400
    error_type = ErrorType.INVALID_PARAMETER

    def __init__(self, message: str, fields: Optional[dict[str, str]] = None) -> None:
        super().__init__(message)
        self.fields = fields


class UnauthorizedError(ApiError):
    status_code = 401
    error_type = ErrorType.UNAUTHORIZED


class ForbiddenError(ApiError):
    status_code = 403
    error_type = ErrorType.FORBIDDEN


class NotFoundError(ApiError):
    status_code = 404
    error_type = ErrorType.NOT_FOUND


class InternalServerError(ApiError):
    status_code = 500
    error_type = ErrorType.INTERNAL_SERVER_ERROR


def status_code_for(exc: BaseException) -> int:
    if isinstance(exc, ApiError):
        return exc.status_code
    return 500


def error_name(exc: BaseException) -> str:
    """Kind used in log context; ``UnknownError`` for anything outside the taxonomy."""

    if isinstance(exc, ApiError):
        return type(exc).__name__
    return "UnknownError"


def error_body(exc: BaseException) -> dict[str, Any]:
    """Build the ``{"error": {...}}`` envelope for ``exc``."""

    if isinstance(exc, ApiError):
        payload: dict[str, Any] = {"message": exc.message, "type": exc.error_type.value}
        if isinstance(exc, InvalidParameterError) and exc.fields is not None:
            payload["fields"] = exc.fields
        return {"error": payload}

    message = str(exc) or "Internal server error"
    return {"error": {"message": message, "type": ErrorType.INTERNAL_SERVER_ERROR.value}}


__all__ = [
    "ApiError",
    "ErrorType",
    "ForbiddenError",
    "InternalServerError",
    "InvalidParameterError",
    "NotFoundError",
    "UnauthorizedError",
    "error_body",
    "error_name",
    "status_code_for",
]
