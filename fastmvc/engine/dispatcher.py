"""Render dispatcher: view resolution, engine selection and failure wrapping."""

import asyncio
import io
from collections.abc import Mapping
from typing import Any

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import Response

from fastmvc.config import DEFAULT_VIEW_FOLDER
from fastmvc.engine.registry import EngineRegistry
from fastmvc.exceptions import EngineNotFoundException, ErrorCode, ViewEngineException
from fastmvc.logging_config import get_logger, log_with_context
from fastmvc.models.render_context import RenderContext
from fastmvc.models.view import View
from fastmvc.protocols import BinarySink, TextSink

logger = get_logger(__name__)


class ViewDispatcher:
    """Turns a view name and models into rendered output.

    Every failure past resolution surfaces as a single ViewEngineException
    chained to the original error.
    """

    def __init__(
        self,
        registry: EngineRegistry,
        base_folder: str = DEFAULT_VIEW_FOLDER,
        default_extension: str | None = None,
    ):
        self.registry = registry
        self.base_folder = base_folder if base_folder.endswith("/") else base_folder + "/"
        self.default_extension = default_extension

    def resolve(self, view_name: str | View) -> View:
        """Resolve a view name against the base folder.

        Absolute names are kept verbatim. Relative names get the default
        extension (if configured and missing) and the base folder prefix.
        """
        if isinstance(view_name, View):
            return view_name.resolve(self.base_folder)

        name = (view_name or "").strip()
        if not name:
            raise ViewEngineException("View name must not be empty")

        view = View(path=name)
        if self.default_extension and not view.extension:
            view = View(path=name + self.default_extension)
        return view.resolve(self.base_folder)

    def dispatch(
        self,
        view_name: str | View,
        models: Mapping[str, Any] | None,
        sink: TextSink | BinarySink,
        request: Request | None = None,
        response: Response | None = None,
    ) -> None:
        """Render a view into the sink.

        Args:
            view_name: View name or View, resolved exactly once
            models: Fully populated model store
            sink: Writable text or binary stream
            request: Ambient request, used to expose models as attributes
            response: Ambient response handle

        Raises:
            ViewEngineException: If no engine supports the view or rendering fails
        """
        view = self.resolve(view_name)

        try:
            engine = self.registry.select(view)
        except EngineNotFoundException as e:
            log_with_context(
                logger,
                "error",
                "No view engine for view",
                view=view.path,
                event_type="view_engine_not_found",
            )
            raise ViewEngineException(
                f"No view engine for view {view.path}",
                code=ErrorCode.VIEW_ENGINE_NOT_FOUND,
                details={"view": view.path},
            ) from e

        log_with_context(
            logger,
            "debug",
            "View engine selected",
            view=view.path,
            engine=engine.name,
            event_type="view_engine_selected",
        )

        context = RenderContext(
            view=view,
            models=dict(models or {}),
            sink=sink,
            request=request,
            response=response,
        )

        try:
            engine.expose_models(context)
            engine.render(context)
        except ViewEngineException:
            raise
        except Exception as e:
            log_with_context(
                logger,
                "error",
                "View rendering failed",
                view=view.path,
                engine=engine.name,
                error=str(e),
                error_type=type(e).__name__,
                event_type="view_render_error",
            )
            raise ViewEngineException(
                f"Error rendering view {view.path}: {e}",
                details={"view": view.path, "engine": engine.name},
            ) from e

    async def dispatch_async(
        self,
        view_name: str | View,
        models: Mapping[str, Any] | None,
        sink: TextSink | BinarySink,
        request: Request | None = None,
        response: Response | None = None,
    ) -> None:
        """Run dispatch in a worker thread so rendering does not block the event loop.

        Cancellation while waiting is reported as a ViewEngineException.
        """
        try:
            await run_in_threadpool(self.dispatch, view_name, models, sink, request, response)
        except asyncio.CancelledError as e:
            # Callers see a render failure here, not TimeoutError from asyncio.timeout or a cancel scope
            log_with_context(
                logger,
                "warning",
                "View rendering cancelled",
                view=str(view_name),
                event_type="view_render_cancelled",
            )
            raise ViewEngineException(
                f"Rendering of view {view_name} was cancelled",
                details={"view": str(view_name)},
            ) from e

    def render_to_string(
        self,
        view_name: str | View,
        models: Mapping[str, Any] | None = None,
        request: Request | None = None,
        response: Response | None = None,
    ) -> str:
        """Render a view into a string."""
        sink = io.StringIO()
        self.dispatch(view_name, models, sink, request=request, response=response)
        return sink.getvalue()
