"""Base class for pluggable view engines.

A view engine is a stateless capability unit: it answers whether it can
render a view and, if chosen, renders it from a RenderContext.
"""

from abc import ABC, abstractmethod

from fastmvc.models.render_context import RenderContext
from fastmvc.models.view import View

# Priority used when an engine declares none
DEFAULT_PRIORITY = 1

# Priority of engines shipped with fastmvc
PRIORITY_BUILTIN = DEFAULT_PRIORITY

# Suggested priority for application engines that should win over built-ins
PRIORITY_APPLICATION = 100


class ViewEngine(ABC):
    """Base class for all view engines.

    Subclasses set ``priority`` to take precedence over other engines that
    support the same view. Engines must not keep per-request state.
    """

    priority: int = DEFAULT_PRIORITY

    @property
    def name(self) -> str:
        """Engine name used in logs and priority overrides."""
        return type(self).__name__

    @abstractmethod
    def supports(self, view: View) -> bool:
        """Return True if this engine can render the resolved view."""

    @abstractmethod
    def render(self, context: RenderContext) -> None:
        """Render the view into the context's sink."""

    def expose_models(self, context: RenderContext) -> None:
        """Make every model addressable as a per-request attribute.

        Called by the dispatcher before render. Without a request there is
        nowhere to expose them, and engines read ``context.models`` directly.
        """
        if context.request is None:
            return
        for name, value in context.models.items():
            setattr(context.request.state, name, value)

    def __repr__(self) -> str:
        return f"<{self.name} priority={self.priority}>"
