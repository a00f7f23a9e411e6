"""JSON view engine rendering the model store itself."""

import json

from pydantic_core import to_jsonable_python

from fastmvc.engine.base import PRIORITY_BUILTIN, ViewEngine
from fastmvc.models.render_context import RenderContext
from fastmvc.models.view import View


class JsonViewEngine(ViewEngine):
    """Serializes all models as a JSON object for ``.json`` views.

    No view file is read; the view name only selects this engine.
    Pydantic models, dataclasses, datetimes and UUIDs are serialized the
    way pydantic dumps them in JSON mode.
    """

    priority = PRIORITY_BUILTIN

    def __init__(self, indent: int | None = None):
        self.indent = indent

    def supports(self, view: View) -> bool:
        return view.extension == ".json"

    def render(self, context: RenderContext) -> None:
        payload = to_jsonable_python(dict(context.models))
        context.write(json.dumps(payload, indent=self.indent, ensure_ascii=False))
