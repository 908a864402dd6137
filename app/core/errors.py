# app/core/errors.py - Application error taxonomy
"""Errors raised by services and dependencies.

Every error carries an HTTP status code and a stable machine-readable code.
The handlers in ``app.core.error_handlers`` turn them into the JSON envelope
``{"error": {"message": ..., "code": ...}}``.
"""
from typing import Any, Dict, Optional, Type


class AppError(Exception):
    """Base exception for the school portal"""

    status_code: int = 500
    code: str = "SERVER_ERROR"
    default_message: str = "Server error"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details
        super().__init__(self.message)

    def __repr__(self):
        return f"<{self.__class__.__name__}(code={self.code}, status={self.status_code}, message='{self.message}')>"


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Validation error"


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access forbidden"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Resource already exists"


class DatabaseError(AppError):
    status_code = 500
    code = "DATABASE_ERROR"
    default_message = "Database error"


class ServerError(AppError):
    status_code = 500
    code = "SERVER_ERROR"
    default_message = "Server error"


ERROR_TYPES: Dict[str, Type[AppError]] = {
    cls.code: cls
    for cls in (
        ValidationError,
        UnauthorizedError,
        ForbiddenError,
        NotFoundError,
        ConflictError,
        DatabaseError,
        ServerError,
    )
}

# HTTP status -> error code, for HTTPExceptions raised by FastAPI itself
STATUS_CODES: Dict[int, str] = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    500: "SERVER_ERROR",
}


def create_error(error_type: str, message: Optional[str] = None) -> AppError:
    """Build an error from its code; unknown codes become SERVER_ERROR"""
    error_cls = ERROR_TYPES.get(error_type, ServerError)
    return error_cls(message)


def code_for_status(status_code: int) -> str:
    if status_code in STATUS_CODES:
        return STATUS_CODES[status_code]
    return "SERVER_ERROR" if status_code >= 500 else "REQUEST_ERROR"


__all__ = [
    "AppError",
    "ValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "DatabaseError",
    "ServerError",
    "ERROR_TYPES",
    "create_error",
    "code_for_status",
]
