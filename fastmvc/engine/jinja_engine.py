"""Jinja2 view engine for HTML templates."""

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from fastmvc.engine.base import PRIORITY_BUILTIN, ViewEngine
from fastmvc.models.render_context import RenderContext
from fastmvc.models.view import View

DEFAULT_TEMPLATE_EXTENSIONS = (".html", ".jinja", ".j2")


class Jinja2ViewEngine(ViewEngine):
    """Renders templates found under the web root.

    The resolved view path is looked up relative to the web root, so
    ``/WEB-INF/views/hello.html`` maps to ``<web_root>/WEB-INF/views/hello.html``.
    Models are available to templates both as top-level names and as
    ``request.state.<name>``.
    """

    priority = PRIORITY_BUILTIN

    def __init__(
        self,
        web_root: Path,
        extensions: Iterable[str] = DEFAULT_TEMPLATE_EXTENSIONS,
        environment: Environment | None = None,
    ):
        self.web_root = Path(web_root)
        self.extensions = tuple(ext.lower() for ext in extensions)
        self.environment = environment or Environment(
            loader=FileSystemLoader(str(self.web_root)),
            autoescape=select_autoescape(enabled_extensions=("html", "htm", "xml", "jinja", "j2")),
            auto_reload=True,
        )

    def supports(self, view: View) -> bool:
        return view.extension in self.extensions

    def template_context(self, context: RenderContext) -> dict[str, Any]:
        """Build the Jinja2 context from the model snapshot."""
        template_context: dict[str, Any] = dict(context.models)
        template_context["models"] = context.models
        if context.request is not None:
            template_context["request"] = context.request
        return template_context

    def render(self, context: RenderContext) -> None:
        template = self.environment.get_template(context.view.path.lstrip("/"))
        for chunk in template.generate(self.template_context(context)):
            context.write(chunk)
