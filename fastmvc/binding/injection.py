"""BindingResult injection into controller instances.

A controller opts into local error handling by declaring a BindingResult
property (with a setter) or a BindingResult-annotated field. The injection
point is resolved once per class and cached. When both exist the property
wins and the field is left untouched.
"""

import typing
from dataclasses import dataclass
from functools import cache
from typing import Any, Literal, TypeVar, get_args

from fastmvc.binding.binding_result import BindingResult

T = TypeVar("T")


@dataclass(frozen=True)
class InjectionPoint:
    """Where a controller class receives its BindingResult."""

    attribute: str
    kind: Literal["property", "field"]

    def inject(self, instance: Any, binding_result: BindingResult) -> None:
        # For properties setattr goes through the setter
        setattr(instance, self.attribute, binding_result)


def _is_binding_result(annotation: Any) -> bool:
    if annotation is BindingResult or annotation == "BindingResult":
        return True
    if isinstance(annotation, str):
        return annotation.replace(" ", "") in {"BindingResult|None", "Optional[BindingResult]"}
    return BindingResult in get_args(annotation)


def _hints(func: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(func)
    except Exception:
        return dict(getattr(func, "__annotations__", {}))


def _property_points(cls: type) -> list[str]:
    names = []
    seen = set()
    for klass in cls.__mro__:
        for name, attr in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if not isinstance(attr, property) or attr.fset is None:
                continue
            setter_hints = _hints(attr.fset)
            setter_params = [v for k, v in setter_hints.items() if k != "return"]
            getter_return = _hints(attr.fget).get("return") if attr.fget is not None else None
            if any(_is_binding_result(h) for h in setter_params) or _is_binding_result(getter_return):
                names.append(name)
    return names


def _field_points(cls: type) -> list[str]:
    hints = _hints(cls)
    names = []
    for name, annotation in hints.items():
        if isinstance(getattr(cls, name, None), property):
            continue
        if _is_binding_result(annotation):
            names.append(name)
    return names


@cache
def injection_point(cls: type) -> InjectionPoint | None:
    """Resolve the BindingResult injection point of a controller class.

    Returns:
        The property injection point if one exists, else the field one,
        else None
    """
    properties = _property_points(cls)
    if properties:
        return InjectionPoint(attribute=properties[0], kind="property")
    fields = _field_points(cls)
    if fields:
        return InjectionPoint(attribute=fields[0], kind="field")
    return None


def create_controller(cls: type[T], binding_result: BindingResult, *args: Any, **kwargs: Any) -> T:
    """Construct a controller and inject the request's BindingResult."""
    instance = cls(*args, **kwargs)
    point = injection_point(cls)
    if point is not None:
        point.inject(instance, binding_result)
    return instance
