"""Tests for conversion, constraint checking and failure routing."""

import logging
from datetime import date
from decimal import Decimal
from enum import Enum

import pytest
from annotated_types import Ge, Gt, Interval, Le, Lt, MaxLen, MinLen, MultipleOf, Predicate
from pydantic import StringConstraints
from starlette.datastructures import ImmutableMultiDict

from fastmvc.binding import (
    MISSING,
    BindOk,
    ConstraintFailed,
    ConversionError,
    ConversionFailed,
    ConverterRegistry,
    ErrorKind,
    Param,
    ParameterBinder,
    zero_value,
)
from fastmvc.binding.binder import raw_values_from
from fastmvc.exceptions import ConstraintViolationException, ConversionException, ErrorCode
from fastmvc.logging_config import REDACTED


class Color(Enum):
    RED = "red"
    BLUE = "blue"


class Swatch:
    """Application type pydantic has no schema for."""

    def __init__(self, name: str):
        self.name = name


SWATCHES = {"red": Swatch("red"), "blue": Swatch("blue")}


@pytest.fixture
def swatch_binder():
    return ParameterBinder(ConverterRegistry({Swatch: lambda raw: SWATCHES[raw]}))


AGE = Param("age", int, constraints=(Ge(1), Le(120)), opt_in=True)
STRICT_AGE = Param("age", int, constraints=(Ge(1), Le(120)))


@pytest.fixture
def binder():
    return ParameterBinder()


class TestConverterRegistry:
    """Tests for raw value conversion."""

    @pytest.mark.parametrize(
        "raw, target, expected",
        [
            ("42", int, 42),
            ("1.5", float, 1.5),
            ("true", bool, True),
            ("off", bool, False),
            ("2.50", Decimal, Decimal("2.50")),
            ("2024-02-29", date, date(2024, 2, 29)),
            ("red", Color, Color.RED),
            ("text", str, "text"),
        ],
    )
    def test_scalar_types(self, raw, target, expected):
        assert ConverterRegistry().convert([raw], target) == expected

    def test_scalar_uses_first_value(self):
        assert ConverterRegistry().convert(["1", "2"], int) == 1

    def test_list_collects_every_value(self):
        assert ConverterRegistry().convert(["1", "2", "3"], list[int]) == [1, 2, 3]

    def test_invalid_value_raises_conversion_error(self):
        with pytest.raises(ConversionError) as exc_info:
            ConverterRegistry().convert(["abc"], int)

        assert exc_info.value.value == "abc"
        assert "integer" in exc_info.value.message

    def test_registered_converter_wins(self):
        registry = ConverterRegistry().register(int, lambda raw: int(raw, 16))

        assert registry.convert(["ff"], int) == 255

    def test_registered_converter_errors_become_conversion_errors(self):
        registry = ConverterRegistry().register(int, lambda raw: int(raw, 16))

        with pytest.raises(ConversionError):
            registry.convert(["zz"], int)

    def test_registered_item_converter_is_used_for_lists(self):
        registry = ConverterRegistry().register(str, str.upper)

        assert registry.convert(["a", "b"], list[str]) == ["A", "B"]
        assert registry.convert(["a", "b"], set[str]) == {"A", "B"}

    @pytest.mark.parametrize(
        "target, expected",
        [(int, 0), (float, 0.0), (bool, False), (str, ""), (list[int], []), (int | None, None), (date, None)],
    )
    def test_zero_value(self, target, expected):
        assert zero_value(target) == expected


class TestRawValues:
    """Tests for reading raw values from request sources."""

    def test_multi_dict(self):
        source = ImmutableMultiDict([("tag", "a"), ("tag", "b")])

        assert raw_values_from(source, "tag") == ["a", "b"]

    def test_plain_mapping(self):
        assert raw_values_from({"tag": ["a", "b"], "name": "x"}, "tag") == ["a", "b"]
        assert raw_values_from({"name": "x"}, "name") == ["x"]
        assert raw_values_from({}, "name") == []
        assert raw_values_from(None, "name") == []


class TestBind:
    """Tests for the outcome of binding one parameter."""

    def test_valid_value(self, binder):
        assert binder.bind(AGE, ["30"]) == BindOk(30)

    def test_conversion_failure(self, binder):
        outcome = binder.bind(AGE, ["abc"])

        assert isinstance(outcome, ConversionFailed)
        assert outcome.error.kind == ErrorKind.CONVERSION
        assert outcome.error.param == "age"
        assert outcome.error.value == "abc"

    def test_constraint_failure_keeps_converted_value(self, binder):
        outcome = binder.bind(AGE, ["150"])

        assert isinstance(outcome, ConstraintFailed)
        assert outcome.value == 150
        assert outcome.error.kind == ErrorKind.CONSTRAINT
        assert "120" in outcome.error.message

    def test_string_length_constraints(self, binder):
        name = Param("name", str, constraints=(MinLen(1), MaxLen(5)))

        assert isinstance(binder.bind(name, [""]), ConstraintFailed)
        assert isinstance(binder.bind(name, ["abcdefgh"]), ConstraintFailed)
        assert binder.bind(name, ["abc"]) == BindOk("abc")

    @pytest.mark.parametrize(
        "target, constraints, raw",
        [
            (int, (Gt(0),), "0"),
            (int, (Lt(10),), "10"),
            (int, (Interval(ge=1, le=5),), "6"),
            (int, (MultipleOf(5),), "7"),
            (str, (Predicate(str.isupper),), "abc"),
            (str, (StringConstraints(pattern=r"^[a-z]+$"),), "ABC"),
        ],
    )
    def test_other_constraint_kinds(self, binder, target, constraints, raw):
        outcome = binder.bind(Param("value", target, constraints=constraints), [raw])

        assert isinstance(outcome, ConstraintFailed)

    def test_missing_value_uses_default(self, binder):
        assert binder.bind(Param("page", int, default=1), []) == BindOk(1)

    def test_empty_string_is_absent_for_non_strings(self, binder):
        assert binder.bind(Param("page", int, default=1), [""]) == BindOk(1)
        assert isinstance(binder.bind(Param("page", int), [""]), ConversionFailed)

    def test_missing_optional_is_none(self, binder):
        assert binder.bind(Param("page", int | None), []) == BindOk(None)

    def test_missing_list_is_empty(self, binder):
        assert binder.bind(Param("tags", list[str]), []) == BindOk([])

    def test_missing_required_value(self, binder):
        outcome = binder.bind(Param("age", int), [])

        assert isinstance(outcome, ConversionFailed)
        assert outcome.error.message == "Field required"


class TestResolve:
    """Tests for routing failures to the BindingResult or an exception."""

    def test_opt_in_conversion_failure_is_recorded(self, binder, binding_result):
        value = binder.resolve(AGE, binder.bind(AGE, ["abc"]), binding_result)

        assert value == 0
        assert binding_result.is_failed()
        assert binding_result.conversion_errors()[0].param == "age"

    def test_opt_in_conversion_failure_binds_default(self, binder, binding_result):
        param = Param("age", int, opt_in=True, default=18)

        assert binder.resolve(param, binder.bind(param, ["abc"]), binding_result) == 18

    def test_opt_in_constraint_failure_binds_converted_value(self, binder, binding_result):
        value = binder.resolve(AGE, binder.bind(AGE, ["150"]), binding_result)

        assert value == 150
        assert len(binding_result.constraint_errors()) == 1

    def test_conversion_failure_without_opt_in_raises(self, binder, binding_result):
        with pytest.raises(ConversionException) as exc_info:
            binder.resolve(STRICT_AGE, binder.bind(STRICT_AGE, ["abc"]), binding_result)

        assert exc_info.value.status_code == 500
        assert exc_info.value.code == ErrorCode.CONVERSION_ERROR
        assert exc_info.value.param == "age"
        assert not binding_result.is_failed()

    def test_constraint_failure_without_opt_in_raises(self, binder, binding_result):
        with pytest.raises(ConstraintViolationException) as exc_info:
            binder.resolve(STRICT_AGE, binder.bind(STRICT_AGE, ["150"]), binding_result)

        assert exc_info.value.status_code == 400
        assert exc_info.value.code == ErrorCode.CONSTRAINT_VIOLATION
        assert not binding_result.is_failed()

    def test_opt_in_without_binding_result_raises(self, binder):
        with pytest.raises(ConstraintViolationException):
            binder.resolve(AGE, binder.bind(AGE, ["150"]), None)

    def test_sensitive_values_are_redacted(self, binder):
        param = Param("password", str, constraints=(MinLen(8),))

        with pytest.raises(ConstraintViolationException) as exc_info:
            binder.resolve(param, binder.bind(param, ["short"]), None)

        assert exc_info.value.details["value"] == REDACTED

    def test_recorded_error_is_logged(self, binder, binding_result, caplog):
        with caplog.at_level(logging.INFO, logger="fastmvc.binding.binder"):
            binder.resolve(AGE, binder.bind(AGE, ["150"]), binding_result)

        assert any(getattr(r, "event_type", None) == "binding_error_recorded" for r in caplog.records)


class TestBindAll:
    """Tests for binding a full parameter list."""

    def test_binds_from_each_source(self, binder, binding_result):
        params = (
            Param("q", str, source="query"),
            Param("tags", list[int], source="query", alias="tag"),
            Param("age", int, source="form"),
        )
        sources = {
            "query": ImmutableMultiDict([("q", "search"), ("tag", "1"), ("tag", "2")]),
            "form": ImmutableMultiDict([("age", "30")]),
        }

        bound = binder.bind_all(params, sources, binding_result)

        assert dict(bound) == {"q": "search", "tags": [1, 2], "age": 30}
        assert bound.tags == [1, 2]
        with pytest.raises(AttributeError):
            bound.missing

    def test_same_failure_twice_is_recorded_once(self, binder, binding_result):
        sources = {"form": ImmutableMultiDict([("age", "150")])}

        binder.bind_all([AGE], sources, binding_result)
        binder.bind_all([AGE], sources, binding_result)

        assert len(binding_result.errors()) == 1

    def test_custom_converters(self, binding_result):
        binder = ParameterBinder(ConverterRegistry().register(bool, lambda raw: raw == "yes"))
        param = Param("subscribe", bool, source="query")

        bound = binder.bind_all([param], {"query": {"subscribe": "yes"}}, binding_result)

        assert bound.subscribe is True

    def test_missing_sentinel_is_never_bound(self, binder, binding_result):
        bound = binder.bind_all([Param("page", int | None, source="query")], {"query": {}}, binding_result)

        assert bound.page is None
        assert bound.page is not MISSING


class TestApplicationTypes:
    """Tests for types converted only by registered converters."""

    def test_converted_value(self, swatch_binder):
        param = Param("color", Swatch, constraints=(Predicate(lambda s: s.name != "blue"),))

        assert swatch_binder.bind(param, ["red"]) == BindOk(SWATCHES["red"])

    def test_constraints_apply_to_converted_value(self, swatch_binder, binding_result):
        param = Param("color", Swatch, constraints=(Predicate(lambda s: s.name != "blue"),), opt_in=True)

        value = swatch_binder.resolve(param, swatch_binder.bind(param, ["blue"]), binding_result)

        assert value is SWATCHES["blue"]
        assert [e.param for e in binding_result.constraint_errors()] == ["color"]

    def test_constraint_failure_without_opt_in_raises(self, swatch_binder):
        param = Param("color", Swatch, constraints=(Predicate(lambda s: s.name != "blue"),))

        with pytest.raises(ConstraintViolationException):
            swatch_binder.resolve(param, swatch_binder.bind(param, ["blue"]), None)

    def test_list_of_application_type_with_constraints(self, swatch_binder):
        param = Param("colors", list[Swatch], constraints=(MaxLen(1),))

        assert isinstance(swatch_binder.bind(param, ["red", "blue"]), ConstraintFailed)

    def test_lookup_error_is_a_conversion_failure(self, swatch_binder, binding_result):
        param = Param("color", Swatch, opt_in=True)

        outcome = swatch_binder.bind(param, ["green"])
        value = swatch_binder.resolve(param, outcome, binding_result)

        assert isinstance(outcome, ConversionFailed)
        assert outcome.error.message == "Invalid value 'green'"
        assert value is None
        assert binding_result.is_failed()

    def test_any_converter_exception_is_a_conversion_error(self):
        def explode(raw):
            raise LookupError(raw)

        with pytest.raises(ConversionError):
            ConverterRegistry().register(Swatch, explode).convert(["x"], Swatch)
