"""Response rendering for handler-selected views."""

import io
from collections.abc import Mapping
from typing import Any

from fastapi import Request
from fastapi.responses import RedirectResponse, Response

from fastmvc.engine.dispatcher import ViewDispatcher
from fastmvc.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

REDIRECT_PREFIX = "redirect:"

MEDIA_TYPES = {
    ".json": "application/json",
    ".txt": "text/plain",
    ".xml": "application/xml",
}
DEFAULT_MEDIA_TYPE = "text/html"


class ViewRenderer:
    """Renders a view name plus models into a response."""

    def __init__(self, dispatcher: ViewDispatcher):
        self.dispatcher = dispatcher

    async def render(
        self,
        request: Request,
        view_name: str,
        models: Mapping[str, Any] | None = None,
        status_code: int = 200,
        media_type: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        """Render a view for the current request.

        A view name starting with ``redirect:`` produces a 303 redirect to the
        rest of the name instead of rendering.

        Args:
            request: FastAPI request object
            view_name: View name, relative to the view folder or absolute
            models: Fully populated models for the view
            status_code: Response status code
            media_type: Response media type, derived from the view extension when None
            headers: Extra response headers

        Returns:
            Response with the rendered view

        Raises:
            ViewEngineException: If no engine supports the view or rendering fails
        """
        if view_name.startswith(REDIRECT_PREFIX):
            location = view_name[len(REDIRECT_PREFIX) :].strip()
            log_with_context(
                logger,
                "debug",
                "Redirecting instead of rendering",
                location=location,
                event_type="view_redirect",
            )
            return RedirectResponse(url=location, status_code=303)

        view = self.dispatcher.resolve(view_name)
        media_type = media_type or MEDIA_TYPES.get(view.extension, DEFAULT_MEDIA_TYPE)

        # Engines may adjust status and headers through the ambient response
        response = Response(status_code=status_code, headers=dict(headers or {}), media_type=media_type)
        sink = io.StringIO()
        await self.dispatcher.dispatch_async(view, models, sink, request=request, response=response)

        passthrough = {k: v for k, v in response.headers.items() if k not in ("content-length", "content-type")}
        return Response(
            content=sink.getvalue(),
            status_code=response.status_code,
            headers=passthrough,
            media_type=media_type,
        )
