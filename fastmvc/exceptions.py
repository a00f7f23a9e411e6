"""Custom exceptions for fastmvc with proper HTTP status codes."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    # Generic errors
    MVC_ERROR = "MVC_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # View errors
    VIEW_ENGINE_ERROR = "VIEW_ENGINE_ERROR"
    VIEW_ENGINE_NOT_FOUND = "VIEW_ENGINE_NOT_FOUND"

    # Binding errors
    BINDING_ERROR = "BINDING_ERROR"
    CONVERSION_ERROR = "CONVERSION_ERROR"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"

    # Configuration errors
    CONFIG_ERROR = "CONFIG_ERROR"
    CONFIG_INVALID = "CONFIG_INVALID"


class MvcException(Exception):
    """Base exception for MVC errors with HTTP status code support.

    All custom exceptions should inherit from this class to ensure
    consistent error handling across the application.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.MVC_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize MVC exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ViewEngineException(MvcException):
    """Uniform failure of view selection or rendering.

    The original error, if any, is available as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VIEW_ENGINE_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code=500, details=details)


class EngineNotFoundException(MvcException):
    """No registered view engine supports the requested view."""

    def __init__(self, view_path: str, details: dict[str, Any] | None = None):
        super().__init__(
            f"No view engine found for view {view_path}",
            code=ErrorCode.VIEW_ENGINE_NOT_FOUND,
            status_code=500,
            details={"view": view_path, **(details or {})},
        )
        self.view_path = view_path


class BindingException(MvcException):
    """Request parameter binding errors."""

    def __init__(
        self,
        message: str,
        param: str,
        code: ErrorCode = ErrorCode.BINDING_ERROR,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, {"param": param, **(details or {})})
        self.param = param


class ConversionException(BindingException):
    """A raw parameter value could not be converted to its target type."""

    def __init__(self, message: str, param: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            param,
            code=ErrorCode.CONVERSION_ERROR,
            status_code=500,
            details=details,
        )


class ConstraintViolationException(BindingException):
    """A converted parameter value violates one of its declared constraints."""

    def __init__(self, message: str, param: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            param,
            code=ErrorCode.CONSTRAINT_VIOLATION,
            status_code=400,
            details=details,
        )


class ConfigurationException(MvcException):
    """Configuration errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)
