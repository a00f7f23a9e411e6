"""Request logging middleware with sensitive data redaction."""

import re
import time

from fastapi import FastAPI, Request

from fastmvc.logging_config import REDACTED, SENSITIVE_PARAMS, get_logger, log_with_context

logger = get_logger(__name__)


def redact_sensitive_data(url: str) -> str:
    """Redact sensitive query parameters from URL."""
    redacted = url
    for param in SENSITIVE_PARAMS:
        pattern = rf"({param}=)([^&\s\"]+)"
        redacted = re.sub(pattern, rf"\g<1>{REDACTED}", redacted)
    return redacted


def add_request_logging(app: FastAPI) -> None:
    """Log every request with method, redacted URL, status and duration."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        log_with_context(
            logger,
            "info",
            "HTTP Request",
            method=request.method,
            url=redact_sensitive_data(str(request.url)),
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            event_type="http_request",
        )
        return response
