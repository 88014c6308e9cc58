"""Transport: resilient HTTP execution against an upstream target.

Builds the outbound request (default headers + target auth + caller headers),
sends it with httpx, and retries any non-success outcome with exponential
backoff:

  delay = base * 2^attempt   (attempt starting at 0, no jitter, no cap)

The delay is applied between attempts only. When every attempt fails the
last TransportFailure is raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx

from universal_gateway.gateway.errors import TransportFailure
from universal_gateway.gateway.types import AuthType, CallOptions, TargetConfig

logger = logging.getLogger(__name__)

USER_AGENT = "Universal-API-Gateway/1.0.0"

DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": USER_AGENT,
    "Accept": "application/json",
    "Content-Type": "application/json",
}

# Upstream error bodies are truncated in failure messages
_MAX_ERROR_BODY = 500


def auth_headers(target: TargetConfig) -> dict[str, str]:
    """Authentication headers for a target, empty when no credential is configured."""
    if not target.has_credential:
        return {}
    if target.auth_type == AuthType.TOKEN:
        return {"Authorization": f"Bearer {target.credential}"}
    if target.auth_type == AuthType.API_KEY:
        return {target.api_key_header: target.credential}
    return {}


def build_headers(target: TargetConfig, extra: Mapping[str, str] | None = None) -> dict[str, str]:
    """Merge default, auth and caller headers (later sources win)."""
    return {**DEFAULT_HEADERS, **auth_headers(target), **(extra or {})}


class Transport:
    """Executes requests against upstream targets with retries.

    Usage:
        transport = Transport()
        data = await transport.execute(target_config, "/users/octocat")
    """

    def __init__(self, sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep):
        self._sleep = sleep

    @staticmethod
    def calculate_backoff(attempt: int, base_delay: float = 1.0) -> float:
        """Exponential backoff: base * 2^attempt."""
        return base_delay * (2**attempt)

    async def execute(
        self,
        target: TargetConfig,
        endpoint: str,
        options: CallOptions | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """Send a request, retrying failures, and return the parsed JSON body."""
        options = options or CallOptions()
        method = options.http_method
        url = f"{target.base_url}{endpoint}"
        headers = build_headers(target, options.headers)
        attempts = max(1, target.retries)

        last_error: TransportFailure | None = None

        async with httpx.AsyncClient(timeout=target.timeout_seconds) as client:
            for attempt in range(attempts):
                logger.info("[%s] %s %s (attempt %d/%d)", target.name, method, url, attempt + 1, attempts)
                try:
                    resp = await client.request(
                        method,
                        url,
                        params=dict(params) if params else None,
                        json=options.body,
                        headers=headers,
                    )
                    return self._parse(target, resp)

                except TransportFailure as e:
                    last_error = e
                except httpx.TimeoutException as e:
                    last_error = TransportFailure(
                        target.name,
                        f"Request timeout after {target.timeout_seconds}s: {e}",
                        timed_out=True,
                    )
                except httpx.HTTPError as e:
                    last_error = TransportFailure(target.name, f"{type(e).__name__}: {e}")

                logger.warning(
                    "[%s] Attempt %d/%d failed: %s",
                    target.name,
                    attempt + 1,
                    attempts,
                    last_error.message,
                )

                if attempt < attempts - 1:
                    delay = self.calculate_backoff(attempt, target.base_retry_delay)
                    logger.info("[%s] Retrying in %.1fs...", target.name, delay)
                    await self._sleep(delay)

        raise last_error

    @staticmethod
    def _parse(target: TargetConfig, resp: httpx.Response) -> Any:
        if not resp.is_success:
            raise TransportFailure(
                target.name,
                f"HTTP {resp.status_code}: {resp.text[:_MAX_ERROR_BODY]}",
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise TransportFailure(
                target.name,
                f"Invalid JSON in response: {e}",
                status_code=resp.status_code,
            ) from e
        logger.debug("[%s] Request successful (%d)", target.name, resp.status_code)
        return data
