"""Exception handlers for the application."""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from fastmvc.exceptions import (
    BindingException,
    ConstraintViolationException,
    ConversionException,
    MvcException,
    ViewEngineException,
)
from fastmvc.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

ExceptionHandler = Callable[[Request, Any], Awaitable[Response]]


def _error_response(exc: MvcException) -> JSONResponse:
    error_content: dict[str, Any] = {"code": exc.code.value, "message": exc.message, "details": exc.details}
    return JSONResponse(status_code=exc.status_code, content={"error": error_content})


async def mvc_exception_handler(request: Request, exc: MvcException) -> JSONResponse:
    """Handle custom MVC exceptions with proper HTTP status codes.

    Returns structured JSON error responses with status code, error code,
    message, and optional details for client-side error handling.
    """
    log_with_context(
        logger,
        "warning",
        "MVC error",
        error_code=exc.code.value,
        error_message=exc.message,
        status_code=exc.status_code,
        method=request.method,
        url=str(request.url.path),
        event_type="mvc_error",
    )
    return _error_response(exc)


async def binding_exception_handler(request: Request, exc: BindingException) -> JSONResponse:
    """Handle conversion and constraint failures of parameters without opt-in."""
    log_with_context(
        logger,
        "warning",
        "Parameter binding failed",
        error_code=exc.code.value,
        param=exc.param,
        error_message=exc.message,
        status_code=exc.status_code,
        method=request.method,
        url=str(request.url.path),
        event_type="binding_error",
    )
    return _error_response(exc)


async def view_engine_exception_handler(request: Request, exc: ViewEngineException) -> JSONResponse:
    """Handle view selection and rendering failures.

    The underlying cause is logged but never exposed to clients.
    """
    cause = exc.__cause__
    log_with_context(
        logger,
        "error",
        "View engine error",
        error_code=exc.code.value,
        error_message=exc.message,
        cause=str(cause) if cause else None,
        cause_type=type(cause).__name__ if cause else None,
        method=request.method,
        url=str(request.url.path),
        event_type="view_engine_error",
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.code.value, "message": "View could not be rendered", "details": {}}},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle general exceptions with logging."""
    log_with_context(
        logger,
        "error",
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        method=request.method,
        url=str(request.url.path),
        event_type="unhandled_error",
    )
    # Also log the traceback separately for debugging
    logger.error("Exception traceback:", exc_info=True)

    # Don't expose internal error details to clients
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
    )


DEFAULT_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    MvcException: mvc_exception_handler,
    ViewEngineException: view_engine_exception_handler,
    BindingException: binding_exception_handler,
    ConversionException: binding_exception_handler,
    ConstraintViolationException: binding_exception_handler,
    Exception: general_exception_handler,
}


def register_error_handlers(
    app: FastAPI,
    overrides: Mapping[type[Exception], ExceptionHandler] | None = None,
) -> None:
    """Register all exception handlers with the application.

    Args:
        app: FastAPI application instance
        overrides: Custom handlers replacing or extending the defaults, keyed by exception class
    """
    handlers = {**DEFAULT_HANDLERS, **(overrides or {})}
    for exc_class, handler in handlers.items():
        app.add_exception_handler(exc_class, handler)
