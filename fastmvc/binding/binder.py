"""Request parameter binding.

Binding is a two-step process. ``ParameterBinder.bind`` converts and
validates one parameter and returns an outcome value instead of raising.
``ParameterBinder.resolve`` then decides, based on the parameter's opt-in
flag, whether a failed outcome is recorded in the request's BindingResult
or raised as an exception for the registered error handlers.
"""

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal

from pydantic import ValidationError

from fastmvc.binding.binding_result import BindingResult
from fastmvc.binding.converters import (
    MISSING,
    ConversionError,
    ConverterRegistry,
    first_error_message,
    is_multi_valued,
    is_optional,
    type_adapter,
    zero_value,
)
from fastmvc.binding.errors import ErrorKind, ParamError
from fastmvc.exceptions import ConstraintViolationException, ConversionException
from fastmvc.logging_config import get_logger, log_with_context, redact_sensitive_value

logger = get_logger(__name__)

ParamSource = Literal["query", "form"]


@dataclass(frozen=True)
class Param:
    """Declaration of one handler parameter.

    Args:
        name: Name the handler receives the value under
        type: Target type, e.g. int, list[int], date, MyEnum
        source: Where raw values come from
        constraints: annotated_types / pydantic metadata such as Ge(1), Le(120), MaxLen(50)
        opt_in: Record failures in the BindingResult instead of raising
        default: Value bound when the parameter is absent
        alias: Request key, when it differs from name
    """

    name: str
    type: Any = str
    source: ParamSource = "form"
    constraints: tuple[Any, ...] = ()
    opt_in: bool = False
    default: Any = MISSING
    alias: str | None = None

    @property
    def key(self) -> str:
        return self.alias or self.name

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @property
    def placeholder(self) -> Any:
        """Value bound when an opt-in parameter fails conversion."""
        return self.default if self.has_default else zero_value(self.type)


@dataclass(frozen=True)
class BindOk:
    value: Any


@dataclass(frozen=True)
class ConversionFailed:
    error: ParamError


@dataclass(frozen=True)
class ConstraintFailed:
    value: Any
    error: ParamError


BindOutcome = BindOk | ConversionFailed | ConstraintFailed


class BoundParams(Mapping[str, Any]):
    """Read-only parameter values bound for one handler call.

    Values are available by key and as attributes.
    """

    def __init__(self, values: dict[str, Any]):
        self._values = dict(values)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getattr__(self, name: str) -> Any:
        try:
            return self.__dict__["_values"][name]
        except KeyError:
            raise AttributeError(name) from None

    def __repr__(self) -> str:
        return f"BoundParams({self._values!r})"


def raw_values_from(source: Any, key: str) -> list[str]:
    """Submitted values for a key from a multi-dict or plain mapping."""
    if source is None:
        return []
    if hasattr(source, "getlist"):
        return [v for v in source.getlist(key)]
    value = source.get(key, MISSING) if isinstance(source, Mapping) else MISSING
    if value is MISSING:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


@dataclass
class ParameterBinder:
    """Converts, validates and routes failures for declared parameters."""

    converters: ConverterRegistry = field(default_factory=ConverterRegistry)

    def _is_absent(self, param: Param, raw_values: Sequence[Any]) -> bool:
        if not raw_values:
            return True
        # An empty form field means "no value" for anything but plain strings
        if not is_multi_valued(param.type) and raw_values[0] == "" and param.type is not str:
            return True
        return False

    def check_constraints(self, param: Param, value: Any) -> str | None:
        """Validate a converted value against the declared constraints.

        Returns:
            The first violation message, or None when the value is valid
        """
        if not param.constraints:
            return None
        adapter = type_adapter(
            Annotated[(param.type, *param.constraints)],
            arbitrary_types=self.converters.handles(param.type),
        )
        try:
            adapter.validate_python(value)
        except ValidationError as e:
            return first_error_message(e)
        return None

    def bind(self, param: Param, raw_values: Sequence[Any]) -> BindOutcome:
        """Convert and validate one parameter without raising."""
        if self._is_absent(param, raw_values):
            if param.has_default:
                return BindOk(param.default)
            if is_multi_valued(param.type):
                return BindOk(zero_value(param.type))
            if is_optional(param.type):
                return BindOk(None)
            return ConversionFailed(ParamError(param=param.name, message="Field required", kind=ErrorKind.CONVERSION))

        submitted = list(raw_values) if is_multi_valued(param.type) else raw_values[0]
        try:
            value = self.converters.convert(raw_values, param.type)
        except ConversionError as e:
            return ConversionFailed(
                ParamError(param=param.name, message=e.message, kind=ErrorKind.CONVERSION, value=submitted)
            )

        violation = self.check_constraints(param, value)
        if violation is not None:
            return ConstraintFailed(
                value,
                ParamError(param=param.name, message=violation, kind=ErrorKind.CONSTRAINT, value=submitted),
            )
        return BindOk(value)

    def resolve(self, param: Param, outcome: BindOutcome, binding_result: BindingResult | None) -> Any:
        """Turn an outcome into the value handed to the handler.

        Opt-in parameters record failures and still produce a value: the
        placeholder after a conversion failure, the converted value after a
        constraint failure. Other parameters raise.

        Raises:
            ConversionException: Conversion failed for a parameter without opt-in
            ConstraintViolationException: Constraint failed for a parameter without opt-in
        """
        if isinstance(outcome, BindOk):
            return outcome.value

        error = outcome.error
        logged_value = redact_sensitive_value(param.name, error.value)

        if param.opt_in and binding_result is not None:
            binding_result._record(error)
            log_with_context(
                logger,
                "info",
                "Binding error recorded",
                param=param.name,
                kind=error.kind.value,
                error_message=error.message,
                value=logged_value,
                event_type="binding_error_recorded",
            )
            if isinstance(outcome, ConversionFailed):
                return param.placeholder
            return outcome.value

        log_with_context(
            logger,
            "warning",
            "Binding error raised",
            param=param.name,
            kind=error.kind.value,
            error_message=error.message,
            value=logged_value,
            event_type="binding_error_raised",
        )
        details = {"value": logged_value}
        if isinstance(outcome, ConversionFailed):
            raise ConversionException(f"Cannot convert parameter '{param.name}': {error.message}", param.name, details)
        raise ConstraintViolationException(f"Invalid parameter '{param.name}': {error.message}", param.name, details)

    def bind_all(
        self,
        params: Iterable[Param],
        sources: Mapping[str, Any],
        binding_result: BindingResult | None,
    ) -> BoundParams:
        """Bind every declared parameter from its source.

        Args:
            params: Parameter declarations
            sources: Source name ("query", "form") to multi-dict of raw values
            binding_result: The request's aggregator

        Returns:
            Values keyed by parameter name
        """
        values: dict[str, Any] = {}
        for param in params:
            raw = raw_values_from(sources.get(param.source), param.key)
            values[param.name] = self.resolve(param, self.bind(param, raw), binding_result)
        return BoundParams(values)
