"""View engines, engine selection and render dispatch."""

from fastmvc.engine.base import DEFAULT_PRIORITY, PRIORITY_APPLICATION, PRIORITY_BUILTIN, ViewEngine
from fastmvc.engine.dispatcher import ViewDispatcher
from fastmvc.engine.jinja_engine import Jinja2ViewEngine
from fastmvc.engine.json_engine import JsonViewEngine
from fastmvc.engine.registry import EngineDescriptor, EngineRegistry, build_registry, discover_engines

__all__ = [
    "DEFAULT_PRIORITY",
    "PRIORITY_APPLICATION",
    "PRIORITY_BUILTIN",
    "EngineDescriptor",
    "EngineRegistry",
    "Jinja2ViewEngine",
    "JsonViewEngine",
    "ViewDispatcher",
    "ViewEngine",
    "build_registry",
    "discover_engines",
]
