"""Immutable per-render bundle passed to a view engine."""

import io
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from starlette.requests import Request
from starlette.responses import Response

from fastmvc.models.view import View
from fastmvc.protocols import BinarySink, TextSink


@dataclass(frozen=True)
class RenderContext:
    """Everything an engine needs for a single render call.

    The models mapping is a read-only snapshot taken before the engine runs.
    """

    view: View
    models: Mapping[str, Any]
    sink: TextSink | BinarySink
    request: Request | None = None
    response: Response | None = None
    encoding: str = field(default="utf-8")

    def __post_init__(self) -> None:
        if not isinstance(self.models, MappingProxyType):
            object.__setattr__(self, "models", MappingProxyType(dict(self.models)))

    @property
    def binary_sink(self) -> bool:
        """Whether the sink expects bytes rather than text."""
        if isinstance(self.sink, (io.RawIOBase, io.BufferedIOBase)):
            return True
        return "b" in getattr(self.sink, "mode", "")

    def write(self, data: str) -> None:
        """Write rendered text to the sink, encoding it for binary sinks."""
        if self.binary_sink:
            self.sink.write(data.encode(self.encoding))
        else:
            self.sink.write(data)
