"""Middleware configuration."""

from fastapi import FastAPI

from fastmvc.config import Settings
from fastmvc.logging_config import get_logger, log_with_context
from fastmvc.middleware.logging_middleware import add_request_logging

logger = get_logger(__name__)


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure all middleware for the application.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """
    log_with_context(
        logger,
        "info",
        "Configuring request logging middleware",
        log_level=settings.log_level,
        event_type="middleware_config",
    )
    add_request_logging(app)

    # Middleware to count requests
    @app.middleware("http")
    async def count_requests(request, call_next):
        """Count total requests for the diagnostics endpoint."""
        app.state.request_count = getattr(app.state, "request_count", 0) + 1
        response = await call_next(request)
        return response
