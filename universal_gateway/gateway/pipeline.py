"""Request Pipeline: orchestrator integrating all gateway components.

For every logical call:
  1. Computes the cache key from (target, endpoint, sorted params)
  2. Reads (GET) consult the Response Cache; hits return immediately
  3. On a miss (and for every write) consumes a Rate Limiter slot
  4. Dispatches via the Transport (retries with exponential backoff)
  5. Stores read results in the cache with an endpoint-derived TTL

The Metrics Collector wraps the whole call, so the outcome is recorded
wherever the call concluded. Concurrent misses for the same key share one
in-flight fetch.

Usage:
    pipeline = RequestPipeline(cache, rate_limiter, transport, targets, metrics)
    data = await pipeline.call("github", "/users/octocat", call_name="github-get-user")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

from universal_gateway.gateway.cache import ResponseCache
from universal_gateway.gateway.errors import ValidationFailure
from universal_gateway.gateway.metrics_collector import MetricsCollector
from universal_gateway.gateway.rate_limiter import FixedWindowRateLimiter
from universal_gateway.gateway.transport import Transport
from universal_gateway.gateway.ttl_policy import select_ttl
from universal_gateway.gateway.types import CallOptions, TargetConfig

logger = logging.getLogger(__name__)


def default_call_name(method: str, endpoint: str) -> str:
    """Metrics name for calls made without one: method plus the top-level resource.

    Path values (usernames, repository names) are left out so the name stays
    a bounded Prometheus label.
    """
    resource = endpoint.strip("/").split("/", 1)[0]
    return f"{method} /{resource}"


class RequestPipeline:
    """Cache -> Rate Limiter -> Transport -> Cache-fill, observed by metrics."""

    def __init__(
        self,
        cache: ResponseCache,
        rate_limiter: FixedWindowRateLimiter,
        transport: Transport,
        targets: dict[str, TargetConfig],
        metrics: MetricsCollector | None = None,
    ):
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.transport = transport
        self.targets = targets
        self.metrics = metrics
        self._in_flight: dict[str, asyncio.Task] = {}

    def _get_target(self, name: str) -> TargetConfig:
        config = self.targets.get(name)
        if config is None:
            raise ValidationFailure(f"API configuration not found for: {name}", field="target", target=name)
        return config

    async def call(
        self,
        target: str,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        options: CallOptions | None = None,
        *,
        call_name: str | None = None,
        validate: Callable[[], None] | None = None,
    ) -> Any:
        """Execute one logical call and return the upstream JSON value.

        Args:
            target: Upstream API name (e.g. "github")
            endpoint: Path relative to the target's base URL
            params: Query parameters (part of the cache key)
            options: Method, extra headers and body; default is a cacheable GET
            call_name: Name under which metrics are recorded
            validate: Input check run before any cache or network step
        """
        options = options or CallOptions()
        call_name = call_name or default_call_name(options.http_method, endpoint)

        if self.metrics is None:
            return await self._call(target, endpoint, params, options, validate)

        async with self.metrics.track(target, call_name):
            result = await self._call(target, endpoint, params, options, validate)
        return result

    async def _call(
        self,
        target: str,
        endpoint: str,
        params: Mapping[str, Any] | None,
        options: CallOptions,
        validate: Callable[[], None] | None,
    ) -> Any:
        if validate is not None:
            validate()

        config = self._get_target(target)

        if not options.is_read:
            # Writes are never cached
            await self.rate_limiter.check_and_consume(target)
            return await self.transport.execute(config, endpoint, options, params=params)

        key = self.cache.generate_key(target, endpoint, params)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(config, endpoint, params, options, key))
            self._in_flight[key] = task
            task.add_done_callback(lambda _t, k=key: self._in_flight.pop(k, None))
        else:
            logger.debug("Joining in-flight fetch for %s", key)

        return await asyncio.shield(task)

    async def _fetch_and_store(
        self,
        config: TargetConfig,
        endpoint: str,
        params: Mapping[str, Any] | None,
        options: CallOptions,
        key: str,
    ) -> Any:
        await self.rate_limiter.check_and_consume(config.name)
        data = await self.transport.execute(config, endpoint, options, params=params)
        self.cache.set(key, data, ttl=select_ttl(endpoint, self.cache.default_ttl))
        return data

    def in_flight_count(self) -> int:
        return len(self._in_flight)
