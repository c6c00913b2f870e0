"""
Error responses.

Every error leaves the API as ``{"error": "<message>"}``. Validation
failures become 400 with a field-level message; anything unexpected is
logged with its traceback and reported as a generic 500.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def internal_error_response() -> JSONResponse:
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def format_validation_errors(exc: RequestValidationError) -> str:
    """Render pydantic errors as ``field: message`` pairs."""
    messages = []
    for error in exc.errors():
        # Drop the leading "body"/"query"/"path" location segment
        location = [str(part) for part in error.get("loc", ())[1:]]
        field = ".".join(location) or "request"
        messages.append(f"{field}: {error.get('msg', 'Invalid value')}")
    return "; ".join(messages) or "Invalid request"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = format_validation_errors(exc)
    logger.info(f"Validation failed for {request.method} {request.url.path}: {message}")
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors"""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return internal_error_response()


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
