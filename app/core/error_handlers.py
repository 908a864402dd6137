# app/core/error_handlers.py - Centralized exception handlers
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import traceback

from app.core.config import settings
from app.core.errors import AppError, code_for_status

logger = logging.getLogger(__name__)


def error_body(message: str, code: str, status_code: int, exc: Exception = None) -> dict:
    """Build the error envelope; server errors hide their message outside development"""
    if status_code >= 500 and not settings.is_development:
        message = "Internal server error"

    body = {"error": {"message": message, "code": code}}
    if status_code >= 500 and settings.is_development and exc is not None:
        body["error"]["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return body


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    content = error_body(exc.message, exc.code, exc.status_code, exc)
    if exc.details and exc.status_code < 500:
        content["error"]["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, code_for_status(exc.status_code), exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))

    logger.info(f"Validation failed on {request.method} {request.url.path}: {messages}")
    return JSONResponse(
        status_code=400,
        content=error_body(", ".join(messages), "VALIDATION_ERROR", 400),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    logger.error(traceback.format_exc())
    return JSONResponse(
        status_code=500,
        content=error_body(str(exc), "SERVER_ERROR", 500, exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
