"""Global exception handlers.

Every error leaves the service in the same envelope as a successful response:

    {"success": false, "message": "Project limit reached"}

Unexpected failures never leak internals to the caller; the full traceback
is logged server-side only.
"""
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskhub.core.exceptions import AppError
from taskhub.core.logging import get_logger

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"
RETRY_AFTER_SECONDS = "5"


def error_response(
    status_code: int,
    message: str,
    data: Optional[Any] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Build an error envelope."""
    content: dict[str, Any] = {"success": False, "message": message}
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain errors raised by guards and handlers."""
    logger.info(
        f"{type(exc).__name__}: {exc.message}",
        extra={"status_code": exc.status_code, "path": request.url.path},
    )
    return error_response(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle framework HTTP errors (unknown routes, wrong methods)."""
    logger.warning(
        f"HTTPException: {exc.detail}",
        extra={"status_code": exc.status_code, "path": request.url.path},
    )
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors as 400 with the field messages joined."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc not in ("body", "query", "path"))
        errors.append({"field": field, "message": error["msg"]})

    message = "; ".join(
        f"{e['field']}: {e['message']}" if e["field"] else e["message"] for e in errors
    ) or "Validation error"

    logger.warning(f"Validation error on {request.url.path}", extra={"path": request.url.path})
    return error_response(status.HTTP_400_BAD_REQUEST, message, data={"errors": errors})


async def pool_timeout_handler(request: Request, exc: PoolTimeoutError) -> JSONResponse:
    """Connection pool exhausted: ask the caller to retry later."""
    logger.error(
        "Database connection pool timed out",
        extra={"path": request.url.path, "status_code": 503},
    )
    return error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Service temporarily unavailable",
        headers={"Retry-After": RETRY_AFTER_SECONDS},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected exceptions."""
    logger.exception(
        f"Unhandled exception: {type(exc).__name__}",
        extra={"path": request.url.path},
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PoolTimeoutError, pool_timeout_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
