"""Conversion of raw request parameter strings to typed values.

Explicitly registered converters take precedence. Every other target type
is converted by a pydantic TypeAdapter in lax mode, which covers numbers,
booleans, strings, decimals, dates, UUIDs, enums, optionals and lists.
"""

import types
from collections.abc import Callable, Sequence
from decimal import Decimal
from functools import lru_cache
from typing import Any, Union, get_args, get_origin

from pydantic import ConfigDict, TypeAdapter, ValidationError


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

MULTI_VALUED_ORIGINS = (list, tuple, set, frozenset)

Converter = Callable[[str], Any]


class ConversionError(ValueError):
    """A raw value could not be converted to the requested type."""

    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.message = message
        self.value = value


def _build_adapter(target: Any, arbitrary_types: bool) -> TypeAdapter:
    config = ConfigDict(arbitrary_types_allowed=True) if arbitrary_types else None
    return TypeAdapter(target, config=config)


@lru_cache(maxsize=512)
def _cached_adapter(target: Any, arbitrary_types: bool) -> TypeAdapter:
    return _build_adapter(target, arbitrary_types)


def type_adapter(target: Any, arbitrary_types: bool = False) -> TypeAdapter:
    """Return a (cached where possible) TypeAdapter for a target type.

    Args:
        target: Type or Annotated type to validate against
        arbitrary_types: Validate types pydantic has no schema for by isinstance
    """
    try:
        hash(target)
    except TypeError:
        # Unhashable annotation metadata
        return _build_adapter(target, arbitrary_types)
    return _cached_adapter(target, arbitrary_types)


def first_error_message(error: ValidationError) -> str:
    """The message of the first pydantic error, without location noise."""
    errors = error.errors()
    return errors[0]["msg"] if errors else str(error)


def is_multi_valued(target: Any) -> bool:
    """Whether the target collects every submitted value of a parameter."""
    return target in MULTI_VALUED_ORIGINS or get_origin(target) in MULTI_VALUED_ORIGINS


def is_optional(target: Any) -> bool:
    """Whether None is an acceptable value for the target."""
    if target is None or target is type(None) or target is Any:
        return True
    origin = get_origin(target)
    if origin is Union or origin is types.UnionType:
        return type(None) in get_args(target)
    return False


def zero_value(target: Any) -> Any:
    """Placeholder bound when an opt-in parameter fails conversion."""
    origin = get_origin(target) or target
    if is_optional(target):
        return None
    if origin is bool:
        return False
    if origin is int:
        return 0
    if origin is float:
        return 0.0
    if origin is Decimal:
        return Decimal(0)
    if origin is str:
        return ""
    if origin in MULTI_VALUED_ORIGINS:
        return origin()
    return None


class ConverterRegistry:
    """Target type to converter mapping with a pydantic fallback."""

    def __init__(self, converters: dict[Any, Converter] | None = None):
        self._converters: dict[Any, Converter] = dict(converters or {})

    def register(self, target: Any, converter: Converter) -> "ConverterRegistry":
        """Register a converter for a target type, returning self for chaining."""
        self._converters[target] = converter
        return self

    def converter_for(self, target: Any) -> Converter | None:
        """Explicitly registered converter for the target, if any."""
        return self._converters.get(target)

    def handles(self, target: Any) -> bool:
        """Whether a registered converter produces the target or its items."""
        if self.converter_for(target) is not None:
            return True
        if is_multi_valued(target):
            args = get_args(target)
            return bool(args) and self.converter_for(args[0]) is not None
        return False

    def _convert_one(self, raw: str, target: Any) -> Any:
        converter = self.converter_for(target)
        if converter is not None:
            try:
                return converter(raw)
            except ConversionError:
                raise
            except Exception as e:
                # Lookup errors stringify to the bare key
                message = str(e) if isinstance(e, (TypeError, ValueError)) else ""
                raise ConversionError(message or f"Invalid value {raw!r}", raw) from e
        try:
            return type_adapter(target).validate_python(raw)
        except ValidationError as e:
            raise ConversionError(first_error_message(e), raw) from e

    def convert(self, raw_values: Sequence[str], target: Any) -> Any:
        """Convert the submitted values of one parameter.

        Multi-valued targets receive every value, scalar targets the first.

        Raises:
            ConversionError: If conversion fails
        """
        if not is_multi_valued(target):
            return self._convert_one(raw_values[0], target)

        args = get_args(target)
        item_type = args[0] if args else Any
        if self.converter_for(item_type) is None:
            try:
                return type_adapter(target).validate_python(list(raw_values))
            except ValidationError as e:
                raise ConversionError(first_error_message(e), list(raw_values)) from e

        container = get_origin(target) or target
        converted = [self._convert_one(raw, item_type) for raw in raw_values]
        return container(converted) if container is not list else converted
