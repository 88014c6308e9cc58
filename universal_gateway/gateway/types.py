"""Core types for the API gateway layer."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class AuthType(str, Enum):
    """How a target expects its credential to be presented."""

    TOKEN = "token"  # Authorization: Bearer <credential>
    API_KEY = "api_key"  # <api_key_header>: <credential>
    NONE = "none"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


# ---------------------------------------------------------------------------
# Target config
# ---------------------------------------------------------------------------


@dataclass
class RateLimitConfig:
    """Fixed-window quota for a target."""

    requests: int = 60  # Allowed calls per window
    window_seconds: float = 60.0


@dataclass
class TargetConfig:
    """Connection, auth and limit configuration for an upstream API."""

    name: str
    base_url: str
    auth_type: AuthType = AuthType.NONE
    credential: str = ""  # Empty means no credential configured
    api_key_header: str = "X-API-Key"
    timeout_seconds: float = 10.0  # Per-attempt timeout
    retries: int = 3  # Total attempts, not extra ones
    base_retry_delay: float = 1.0  # Backoff base (seconds)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)

    @property
    def has_credential(self) -> bool:
        return bool(self.credential)


# Default configurations per target (credentials are filled in from settings)
DEFAULT_TARGET_CONFIGS: dict[str, TargetConfig] = {
    "github": TargetConfig(
        name="github",
        base_url="https://api.github.com",
        auth_type=AuthType.TOKEN,
        timeout_seconds=10.0,
        retries=3,
        rate_limit=RateLimitConfig(requests=5000, window_seconds=3600.0),
    ),
    "weather": TargetConfig(
        name="weather",
        base_url="https://api.weatherapi.com/v1",
        auth_type=AuthType.API_KEY,
        timeout_seconds=5.0,
        retries=2,
        rate_limit=RateLimitConfig(requests=1000, window_seconds=3600.0),
    ),
    "news": TargetConfig(
        name="news",
        base_url="https://newsapi.org/v2",
        auth_type=AuthType.API_KEY,
        timeout_seconds=10.0,
        retries=2,
        rate_limit=RateLimitConfig(requests=100, window_seconds=86400.0),
    ),
}


# ---------------------------------------------------------------------------
# Request options
# ---------------------------------------------------------------------------


@dataclass
class CallOptions:
    """Per-call overrides passed through the pipeline to the transport.

    ``method=None`` means a plain read (GET) and makes the call cacheable.
    """

    method: HttpMethod | str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None

    @property
    def http_method(self) -> str:
        if self.method is None:
            return HttpMethod.GET.value
        if isinstance(self.method, HttpMethod):
            return self.method.value
        return str(self.method).upper()

    @property
    def is_read(self) -> bool:
        return self.http_method == HttpMethod.GET.value


# ---------------------------------------------------------------------------
# Cache entry
# ---------------------------------------------------------------------------


@dataclass
class CacheEntry:
    """A cached upstream response with its expiry."""

    value: Any
    created_at: float = field(default_factory=time.monotonic)
    expires_at: float = 0.0

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at
