"""Application factory for creating and configuring the FastAPI app."""

from collections.abc import Iterable, Mapping

from fastapi import FastAPI

from fastmvc import __version__
from fastmvc.binding.binder import ParameterBinder
from fastmvc.config import Settings, get_settings
from fastmvc.core.lifespan import lifespan
from fastmvc.core.middleware import setup_middleware
from fastmvc.engine.base import ViewEngine
from fastmvc.middleware.error_handlers import ExceptionHandler, register_error_handlers
from fastmvc.routers import health_router, view_router


def create_app(
    settings: Settings | None = None,
    engines: Iterable[ViewEngine] = (),
    error_handlers: Mapping[type[Exception], ExceptionHandler] | None = None,
    parameter_binder: ParameterBinder | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the environment-loaded singleton
        engines: Application view engines registered after the built-in and discovered ones
        error_handlers: Custom exception handlers overriding the defaults
        parameter_binder: Binder with application converters

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="fastmvc",
        description="""
        **fastmvc** - server-rendered views and request parameter binding for FastAPI

        ## Views
        Handlers return a view name and models. The view engine with the highest
        priority among those supporting the view renders it.

        ## Binding
        Parameters declared with opt-in record conversion and constraint errors
        in the request's BindingResult; other parameters fail the request.
        """,
        version=__version__,
        lifespan=lifespan,
        license_info={
            "name": "MIT",
        },
    )

    # Startup configuration consumed by the lifespan
    app.state.settings = settings
    app.state.extra_engines = tuple(engines)
    app.state.parameter_binder = parameter_binder

    # Configure middleware
    setup_middleware(app, settings)

    # Register exception handlers
    register_error_handlers(app, error_handlers)

    # View routes (HTML pages and form handling) - no prefix
    app.include_router(view_router.router, tags=["views"])

    # Health and diagnostics endpoints
    app.include_router(health_router.router, tags=["health"])

    return app
