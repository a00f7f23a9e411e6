"""View engine registry and selection.

The registry is built once at startup from a provider list and never changes
afterwards, so concurrent lookups need no locking.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from importlib.metadata import entry_points
from typing import TYPE_CHECKING

from fastmvc.engine.base import DEFAULT_PRIORITY, ViewEngine
from fastmvc.exceptions import ConfigurationException, EngineNotFoundException, ErrorCode
from fastmvc.logging_config import get_logger, log_with_context
from fastmvc.models.view import View

if TYPE_CHECKING:
    from fastmvc.config import Settings

logger = get_logger(__name__)

EngineProvider = ViewEngine | tuple[ViewEngine, int]


@dataclass(frozen=True)
class EngineDescriptor:
    """A registered engine with its effective priority and discovery order."""

    engine: ViewEngine
    priority: int
    order: int

    @property
    def name(self) -> str:
        return self.engine.name


class EngineRegistry:
    """Immutable, priority-ordered set of view engines.

    Selection keeps the engines whose ``supports`` accepts the view and
    returns the one with the highest priority. Equal priorities fall back to
    discovery order (stable sort).
    """

    def __init__(self, providers: Iterable[EngineProvider] = ()):
        """Build the registry.

        Args:
            providers: Engines, or (engine, priority) pairs overriding the
                engine's declared priority
        """
        descriptors = []
        for order, provider in enumerate(providers):
            if isinstance(provider, tuple):
                engine, priority = provider
            else:
                engine, priority = provider, getattr(provider, "priority", DEFAULT_PRIORITY)
            if not isinstance(engine, ViewEngine):
                raise TypeError(f"{engine!r} is not a ViewEngine")
            descriptors.append(EngineDescriptor(engine=engine, priority=int(priority), order=order))
        self._descriptors: tuple[EngineDescriptor, ...] = tuple(descriptors)

    @property
    def descriptors(self) -> tuple[EngineDescriptor, ...]:
        """Registered descriptors in discovery order."""
        return self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[EngineDescriptor]:
        return iter(self._descriptors)

    def _supports(self, descriptor: EngineDescriptor, view: View) -> bool:
        try:
            return bool(descriptor.engine.supports(view))
        except Exception as e:
            log_with_context(
                logger,
                "warning",
                "View engine predicate raised, treating as unsupported",
                engine=descriptor.name,
                view=view.path,
                error=str(e),
                error_type=type(e).__name__,
                event_type="engine_predicate_error",
            )
            return False

    def candidates(self, view: View) -> list[EngineDescriptor]:
        """Engines supporting the view, best first."""
        surviving = [d for d in self._descriptors if self._supports(d, view)]
        # sorted() is stable, so equal priorities keep discovery order
        return sorted(surviving, key=lambda d: d.priority, reverse=True)

    def find(self, view: View) -> ViewEngine | None:
        """Select an engine for the view, or None when none supports it."""
        candidates = self.candidates(view)
        return candidates[0].engine if candidates else None

    def select(self, view: View) -> ViewEngine:
        """Select the engine responsible for rendering the view.

        Raises:
            EngineNotFoundException: If no registered engine supports the view
        """
        engine = self.find(view)
        if engine is None:
            raise EngineNotFoundException(view.path, details={"registered": [d.name for d in self._descriptors]})
        return engine


def discover_engines(group: str) -> list[ViewEngine]:
    """Instantiate view engines advertised by installed distributions.

    Each entry point in the group must reference a ViewEngine subclass with
    a no-argument constructor. Broken entry points are logged and skipped.
    """
    engines: list[ViewEngine] = []
    for entry_point in entry_points(group=group):
        try:
            engine_class = entry_point.load()
            engine = engine_class()
        except Exception as e:
            log_with_context(
                logger,
                "error",
                "Failed to load view engine entry point",
                entry_point=entry_point.name,
                error=str(e),
                error_type=type(e).__name__,
                event_type="engine_discovery_error",
            )
            continue
        if not isinstance(engine, ViewEngine):
            log_with_context(
                logger,
                "error",
                "Entry point does not provide a ViewEngine",
                entry_point=entry_point.name,
                event_type="engine_discovery_error",
            )
            continue
        engines.append(engine)
    return engines


def build_registry(settings: "Settings", extra: Iterable[ViewEngine] = ()) -> EngineRegistry:
    """Build the process-wide registry.

    Discovery order is: built-in engines, entry point engines, then extra.
    Priorities listed in ``settings.engine_priorities`` override the
    engine's declared priority.

    Raises:
        ConfigurationException: If a priority override names no registered engine
    """
    from fastmvc.engine.jinja_engine import Jinja2ViewEngine
    from fastmvc.engine.json_engine import JsonViewEngine

    engines: list[ViewEngine] = [
        Jinja2ViewEngine(settings.web_root, extensions=settings.template_extensions),
        JsonViewEngine(),
    ]
    engines.extend(discover_engines(settings.engine_entry_point_group))
    engines.extend(extra)

    unknown = sorted(set(settings.engine_priorities) - {engine.name for engine in engines})
    if unknown:
        raise ConfigurationException(
            f"Priority overrides for unknown view engines: {', '.join(unknown)}",
            code=ErrorCode.CONFIG_INVALID,
            details={"unknown": unknown, "registered": [engine.name for engine in engines]},
        )

    providers: list[EngineProvider] = []
    for engine in engines:
        override = settings.engine_priorities.get(engine.name)
        providers.append((engine, override) if override is not None else engine)

    registry = EngineRegistry(providers)
    log_with_context(
        logger,
        "info",
        "View engine registry initialized",
        engines=[f"{d.name}:{d.priority}" for d in registry],
        event_type="engine_registry_ready",
    )
    return registry
