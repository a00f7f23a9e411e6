"""Tests for view engine registration and selection."""

import logging
from unittest.mock import MagicMock, patch

import pytest

from fastmvc.config import Settings
from fastmvc.engine import (
    DEFAULT_PRIORITY,
    EngineRegistry,
    Jinja2ViewEngine,
    JsonViewEngine,
    ViewEngine,
    build_registry,
    discover_engines,
)
from fastmvc.exceptions import ConfigurationException, EngineNotFoundException, ErrorCode
from fastmvc.models import View


class StubEngine(ViewEngine):
    """Engine with a fixed answer for supports()."""

    def __init__(self, label: str, supported: bool = True, priority: int | None = None):
        self.label = label
        self.supported = supported
        if priority is not None:
            self.priority = priority

    @property
    def name(self) -> str:
        return self.label

    def supports(self, view):
        return self.supported

    def render(self, context):
        context.write(self.label)


class ExplodingEngine(StubEngine):
    """Engine whose predicate raises."""

    def supports(self, view):
        raise RuntimeError("predicate exploded")


VIEW = View(path="/WEB-INF/views/page.html", resolved=True)


class TestSelection:
    """Tests for the selection algorithm."""

    def test_default_priority_is_one(self):
        assert DEFAULT_PRIORITY == 1
        assert StubEngine("c").priority == 1

    def test_highest_priority_wins(self):
        a = StubEngine("a", priority=10)
        b = StubEngine("b", priority=5)
        c = StubEngine("c")
        registry = EngineRegistry([c, b, a])

        assert registry.select(VIEW) is a

    def test_selection_is_deterministic(self):
        registry = EngineRegistry([StubEngine("a", priority=3), StubEngine("b", priority=3), StubEngine("c")])

        selected = {id(registry.select(VIEW)) for _ in range(20)}

        assert len(selected) == 1

    def test_unsupported_engine_never_selected(self):
        high = StubEngine("high", supported=False, priority=1000)
        low = StubEngine("low", priority=1)
        registry = EngineRegistry([high, low])

        assert registry.select(VIEW) is low
        assert [d.name for d in registry.candidates(VIEW)] == ["low"]

    def test_equal_priority_keeps_discovery_order(self):
        first = StubEngine("first", priority=5)
        second = StubEngine("second", priority=5)

        assert EngineRegistry([first, second]).select(VIEW) is first
        assert EngineRegistry([second, first]).select(VIEW) is second

    def test_not_found_raises(self):
        registry = EngineRegistry([StubEngine("no", supported=False)])

        with pytest.raises(EngineNotFoundException) as exc_info:
            registry.select(VIEW)

        assert exc_info.value.view_path == VIEW.path
        assert exc_info.value.details["registered"] == ["no"]

    def test_empty_registry_raises(self):
        with pytest.raises(EngineNotFoundException):
            EngineRegistry().select(VIEW)

    def test_find_returns_none_when_unsupported(self):
        assert EngineRegistry([StubEngine("no", supported=False)]).find(VIEW) is None

    def test_raising_predicate_is_skipped_and_logged(self, caplog):
        exploding = ExplodingEngine("boom", priority=100)
        fallback = StubEngine("fallback")
        registry = EngineRegistry([exploding, fallback])

        with caplog.at_level(logging.WARNING, logger="fastmvc.engine.registry"):
            selected = registry.select(VIEW)

        assert selected is fallback
        assert any(getattr(r, "event_type", None) == "engine_predicate_error" for r in caplog.records)

    def test_explicit_priority_overrides_declared(self):
        a = StubEngine("a", priority=10)
        b = StubEngine("b", priority=5)
        registry = EngineRegistry([a, (b, 50)])

        assert registry.select(VIEW) is b
        assert [d.priority for d in registry.descriptors] == [10, 50]

    def test_descriptors_are_immutable(self):
        registry = EngineRegistry([StubEngine("a")])

        assert isinstance(registry.descriptors, tuple)
        assert len(registry) == 1
        assert [d.order for d in registry] == [0]

    def test_rejects_non_engines(self):
        with pytest.raises(TypeError):
            EngineRegistry([object()])


class TestDiscovery:
    """Tests for entry point discovery and registry construction."""

    def test_discover_engines_loads_entry_points(self):
        good = MagicMock()
        good.name = "good"
        good.load.return_value = lambda: StubEngine("discovered")
        broken = MagicMock()
        broken.name = "broken"
        broken.load.side_effect = ImportError("no module")
        wrong = MagicMock()
        wrong.name = "wrong"
        wrong.load.return_value = object

        with patch("fastmvc.engine.registry.entry_points", return_value=[good, broken, wrong]) as mock_eps:
            engines = discover_engines("fastmvc.view_engines")

        mock_eps.assert_called_once_with(group="fastmvc.view_engines")
        assert [e.name for e in engines] == ["discovered"]

    def test_build_registry_order_and_overrides(self, test_settings):
        settings = test_settings.model_copy(update={"engine_priorities": {"JsonViewEngine": 7}})
        extra = StubEngine("app", priority=100)

        with patch("fastmvc.engine.registry.entry_points", return_value=[]):
            registry = build_registry(settings, extra=[extra])

        engines = [d.engine for d in registry]
        assert isinstance(engines[0], Jinja2ViewEngine)
        assert isinstance(engines[1], JsonViewEngine)
        assert engines[2] is extra
        assert [d.priority for d in registry] == [1, 7, 100]

    def test_unknown_priority_override_is_a_configuration_error(self, test_settings):
        settings = test_settings.model_copy(update={"engine_priorities": {"VelocityViewEngine": 5}})

        with patch("fastmvc.engine.registry.entry_points", return_value=[]):
            with pytest.raises(ConfigurationException) as exc_info:
                build_registry(settings)

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID
        assert exc_info.value.details["unknown"] == ["VelocityViewEngine"]

    def test_build_registry_selects_builtins_by_extension(self, test_settings):
        with patch("fastmvc.engine.registry.entry_points", return_value=[]):
            registry = build_registry(test_settings)

        assert isinstance(registry.select(View(path="/a.html", resolved=True)), Jinja2ViewEngine)
        assert isinstance(registry.select(View(path="/a.json", resolved=True)), JsonViewEngine)
        with pytest.raises(EngineNotFoundException):
            registry.select(View(path="/a.jsp", resolved=True))

    def test_template_extensions_come_from_settings(self, tmp_path):
        settings = Settings(web_root=tmp_path, template_extensions=[".tpl"])

        with patch("fastmvc.engine.registry.entry_points", return_value=[]):
            registry = build_registry(settings)

        assert isinstance(registry.select(View(path="/a.tpl", resolved=True)), Jinja2ViewEngine)
        assert registry.find(View(path="/a.html", resolved=True)) is None
