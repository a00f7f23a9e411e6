"""Pydantic models for binding and validation errors."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorKind(str, Enum):
    """Where a binding error originated."""

    CONVERSION = "conversion"
    CONSTRAINT = "constraint"


class ParamError(BaseModel):
    """A single conversion or constraint failure for one request parameter."""

    model_config = ConfigDict(frozen=True)

    param: str = Field(..., description="Parameter name as declared by the handler")
    message: str = Field(..., description="Human-readable error message")
    kind: ErrorKind = Field(..., description="Conversion or constraint failure")
    value: Any = Field(default=None, description="Submitted raw value, if any")

    @property
    def key(self) -> tuple[str, str, str, str]:
        """Identity used to de-duplicate errors within one request."""
        return (self.param, self.kind.value, self.message, repr(self.value))
