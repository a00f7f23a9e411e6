"""Application lifespan management."""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from fastmvc import __version__
from fastmvc.binding.binder import ParameterBinder
from fastmvc.config import Settings, get_settings
from fastmvc.engine.dispatcher import ViewDispatcher
from fastmvc.engine.registry import build_registry
from fastmvc.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events.

    The engine registry is built exactly once here and is read-only for the
    rest of the process lifetime.
    """
    app.state.startup_time = time.time()
    app.state.request_count = 0

    settings: Settings = getattr(app.state, "settings", None) or get_settings()

    log_with_context(
        logger,
        "info",
        "Starting fastmvc application",
        version=__version__,
        event_type="app_startup",
    )

    registry = build_registry(settings, extra=getattr(app.state, "extra_engines", ()))
    app.state.engine_registry = registry
    app.state.view_dispatcher = ViewDispatcher(
        registry,
        base_folder=settings.view_folder,
        default_extension=settings.default_view_extension,
    )
    if getattr(app.state, "parameter_binder", None) is None:
        app.state.parameter_binder = ParameterBinder()

    log_with_context(
        logger,
        "info",
        "View dispatcher initialized",
        view_folder=settings.view_folder,
        engine_count=len(registry),
        event_type="view_dispatcher_ready",
    )

    try:
        yield
    except Exception as e:
        # Log the error for observability
        log_with_context(
            logger,
            "error",
            "Application error during lifespan",
            error=str(e),
            error_type=type(e).__name__,
            event_type="app_error",
        )
        raise
    finally:
        log_with_context(
            logger,
            "info",
            "Shutting down fastmvc application",
            event_type="app_shutdown",
        )
        app.state.view_dispatcher = None
