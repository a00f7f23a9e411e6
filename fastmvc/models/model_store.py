"""Per-request model store handed to view engines."""

from collections.abc import Iterator, MutableMapping
from typing import Any, TypeVar

T = TypeVar("T")


class Models(MutableMapping[str, Any]):
    """Ordered name to value mapping built by a handler for one request.

    Example:
        models = Models().put("user", user).put("greeting", "Hello")
    """

    def __init__(self, initial: dict[str, Any] | None = None, **values: Any):
        self._values: dict[str, Any] = {}
        for name, value in {**(initial or {}), **values}.items():
            self[name] = value

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __setitem__(self, name: str, value: Any) -> None:
        if not isinstance(name, str):
            raise TypeError(f"Model names must be strings, got {type(name).__name__}")
        self._values[name] = value

    def __delitem__(self, name: str) -> None:
        del self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Models({self._values!r})"

    def put(self, name: str, value: Any) -> "Models":
        """Store a named value and return self for chaining."""
        self[name] = value
        return self

    def get_as(self, name: str, type_: type[T]) -> T:
        """Get a value checked against the expected type.

        Raises:
            KeyError: If no value is stored under name
            TypeError: If the stored value is not an instance of type_
        """
        value = self._values[name]
        if not isinstance(value, type_):
            raise TypeError(f"Model {name!r} is {type(value).__name__}, expected {type_.__name__}")
        return value

    def as_dict(self) -> dict[str, Any]:
        """Shallow copy of the stored values."""
        return dict(self._values)
