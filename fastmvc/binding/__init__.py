"""Request parameter binding and binding error aggregation."""

from fastmvc.binding.binder import (
    BindOk,
    BindOutcome,
    BoundParams,
    ConstraintFailed,
    ConversionFailed,
    Param,
    ParameterBinder,
)
from fastmvc.binding.binding_result import BindingResult, BindingState
from fastmvc.binding.converters import MISSING, ConversionError, ConverterRegistry, zero_value
from fastmvc.binding.errors import ErrorKind, ParamError
from fastmvc.binding.injection import InjectionPoint, create_controller, injection_point

__all__ = [
    "MISSING",
    "BindOk",
    "BindOutcome",
    "BindingResult",
    "BindingState",
    "BoundParams",
    "ConstraintFailed",
    "ConversionError",
    "ConversionFailed",
    "ConverterRegistry",
    "ErrorKind",
    "InjectionPoint",
    "Param",
    "ParamError",
    "ParameterBinder",
    "create_controller",
    "injection_point",
    "zero_value",
]
