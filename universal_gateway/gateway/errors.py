"""Gateway error types.

Every failure that leaves the pipeline is a ``GatewayError`` subclass carrying
its kind, the target it concerns and enough structure (status code, retry-after)
for callers to build a user-facing message without parsing error text.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Failure categories surfaced by the gateway."""

    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    TRANSPORT_FAILURE = "transport_failure"
    VALIDATION_FAILURE = "validation_failure"


class GatewayError(Exception):
    """Base class for failures propagated by the gateway."""

    kind: ErrorKind

    def __init__(self, message: str, target: str = ""):
        super().__init__(message)
        self.message = message
        self.target = target

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "target": self.target,
            "message": self.message,
        }


class RateLimitExceeded(GatewayError):
    """The target's fixed window is exhausted. Never retried by the gateway."""

    kind = ErrorKind.RATE_LIMIT_EXCEEDED

    def __init__(self, target: str, retry_after: float):
        self.retry_after = max(retry_after, 0.0)
        super().__init__(
            f"Rate limit exceeded for {target}. Try again in {math.ceil(self.retry_after)} seconds",
            target=target,
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["retry_after"] = self.retry_after
        return data


class TransportFailure(GatewayError):
    """Network error, timeout or non-2xx response from the upstream."""

    kind = ErrorKind.TRANSPORT_FAILURE

    def __init__(
        self,
        target: str,
        message: str,
        status_code: int | None = None,
        timed_out: bool = False,
    ):
        super().__init__(message, target=target)
        self.status_code = status_code
        self.timed_out = timed_out

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        data["timed_out"] = self.timed_out
        return data


class ValidationFailure(GatewayError):
    """Caller-supplied input is malformed. Raised before any network attempt."""

    kind = ErrorKind.VALIDATION_FAILURE

    def __init__(self, message: str, field: str = "", target: str = ""):
        super().__init__(message, target=target)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        return data


def error_kind_of(error: BaseException | str) -> str:
    """Classify an error for metrics: gateway kind, else the exception class name."""
    if isinstance(error, str):
        return error
    if isinstance(error, GatewayError):
        return error.kind.value
    return type(error).__name__


# Status codes with a dedicated user-facing description
_STATUS_DESCRIPTIONS: dict[int, tuple[str, str]] = {
    401: ("Authentication failed", "Invalid or missing API credentials"),
    403: ("Access forbidden", "Insufficient permissions for this API endpoint"),
    404: ("Resource not found", "The requested resource does not exist"),
}


def describe_error(error: BaseException, api_name: str) -> dict[str, Any]:
    """Build a user-facing error payload from a failure."""
    logger.error("[%s] Error: %s", api_name, error)

    if isinstance(error, RateLimitExceeded):
        return {
            "error": "Rate limit exceeded",
            "message": error.message,
            "retry_after": error.retry_after,
            "api_name": api_name,
        }

    if isinstance(error, ValidationFailure):
        return {
            "error": "Validation failed",
            "message": error.message,
            "field": error.field,
            "api_name": api_name,
        }

    if isinstance(error, TransportFailure):
        if error.status_code in _STATUS_DESCRIPTIONS:
            title, message = _STATUS_DESCRIPTIONS[error.status_code]
            return {
                "error": title,
                "message": message,
                "status_code": error.status_code,
                "api_name": api_name,
            }
        if error.timed_out:
            return {
                "error": "Request timeout",
                "message": "The API request timed out",
                "api_name": api_name,
            }
        return {
            "error": "API request failed",
            "message": error.message,
            "status_code": error.status_code,
            "api_name": api_name,
        }

    return {
        "error": "API request failed",
        "message": str(error),
        "api_name": api_name,
    }
