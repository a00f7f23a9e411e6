"""Per-request aggregator of binding and validation errors.

A BindingResult starts empty and moves to HAS_ERRORS on the first recorded
error. It never resets: a fresh instance is created for every request.
"""

from enum import Enum

from fastmvc.binding.errors import ErrorKind, ParamError

# request.state attribute holding the aggregator; kept apart from exposed model names
STATE_KEY = "_fastmvc_binding_result"


class BindingState(str, Enum):
    """Lifecycle states of a BindingResult."""

    EMPTY = "empty"
    HAS_ERRORS = "has_errors"


class BindingResult:
    """Errors collected while binding opt-in parameters of one request.

    Handler code reads it; only the parameter binder writes to it.

    Example:
        if binding_result.is_failed():
            return renderer.render(request, "register.html", {"errors": binding_result.error_map()})
    """

    def __init__(self):
        self._errors: list[ParamError] = []
        self._seen: set[tuple[str, str, str, str]] = set()

    def _record(self, error: ParamError) -> bool:
        """Append an error unless an identical one is already recorded.

        Returns:
            True if the error was added
        """
        if error.key in self._seen:
            return False
        self._seen.add(error.key)
        self._errors.append(error)
        return True

    @property
    def state(self) -> BindingState:
        return BindingState.HAS_ERRORS if self._errors else BindingState.EMPTY

    def is_failed(self) -> bool:
        """True if at least one error has been recorded."""
        return bool(self._errors)

    def errors(self) -> tuple[ParamError, ...]:
        """All errors in the order they were recorded."""
        return tuple(self._errors)

    def get_errors(self, param: str) -> list[ParamError]:
        """Errors recorded for one parameter."""
        return [e for e in self._errors if e.param == param]

    def conversion_errors(self) -> list[ParamError]:
        return [e for e in self._errors if e.kind == ErrorKind.CONVERSION]

    def constraint_errors(self) -> list[ParamError]:
        return [e for e in self._errors if e.kind == ErrorKind.CONSTRAINT]

    def all_messages(self) -> list[str]:
        return [e.message for e in self._errors]

    def error_map(self) -> dict[str, list[str]]:
        """Messages grouped by parameter name, convenient for templates."""
        grouped: dict[str, list[str]] = {}
        for error in self._errors:
            grouped.setdefault(error.param, []).append(error.message)
        return grouped

    def __repr__(self) -> str:
        return f"BindingResult(state={self.state.value}, errors={len(self._errors)})"
