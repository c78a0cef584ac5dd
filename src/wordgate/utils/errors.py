"""
Standardized error handling for the Wordgate API

Every error response is JSON with a stable `error` field and optional
`details` and `reason` fields for programmatic handling.
"""

import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

ERROR_REGISTRY = {
    400: "Bad request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    405: "Method not allowed",
    500: "Internal server error",
    503: "Service unavailable",
}


class ApiError(Exception):
    """An error that maps directly onto an HTTP response."""

    def __init__(self, status_code: int, error: str, details: Any = None,
                 reason: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details
        self.reason = reason
        self.headers = headers


def error_body(error: str, details: Any = None, reason: Optional[str] = None,
               **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": error}
    if details is not None:
        body["details"] = details
    if reason is not None:
        body["reason"] = reason
    body.update(extra)
    return body


async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error, exc.details, exc.reason),
        headers=exc.headers,
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render routing errors (404, 405, ...) in the standard error format"""
    message = ERROR_REGISTRY.get(exc.status_code, "Internal server error")
    details = exc.detail if exc.detail and exc.detail != message else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, details),
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(e.get("type") == "json_invalid" for e in errors):
        return JSONResponse(status_code=400, content=error_body("Invalid JSON body", reason="INVALID_JSON"))

    return JSONResponse(
        status_code=400,
        content=error_body("Bad request", details=[e.get("msg") for e in errors], reason="INVALID_REQUEST"),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)

    extra = {}
    settings = getattr(request.app.state, "settings", None)
    if settings is not None and settings.expose_error_traces:
        extra["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    return JSONResponse(
        status_code=500,
        content=error_body("Internal server error", details=str(exc), **extra),
    )


def register_error_handlers(app) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
