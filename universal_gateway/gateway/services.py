"""Construction of the gateway object graph.

One ``GatewayServices`` bundle is built at startup and passed to whatever
needs it; there are no module-level singletons for cache, limiter or metrics.
"""

from __future__ import annotations

from dataclasses import dataclass

from universal_gateway.core.config import Settings, build_target_configs
from universal_gateway.gateway.cache import ResponseCache
from universal_gateway.gateway.metrics_collector import MetricsCollector
from universal_gateway.gateway.pipeline import RequestPipeline
from universal_gateway.gateway.rate_limiter import FixedWindowRateLimiter
from universal_gateway.gateway.transport import Transport
from universal_gateway.gateway.types import TargetConfig


@dataclass
class GatewayServices:
    targets: dict[str, TargetConfig]
    cache: ResponseCache
    rate_limiter: FixedWindowRateLimiter
    transport: Transport
    metrics: MetricsCollector
    pipeline: RequestPipeline


def build_services(settings: Settings, transport: Transport | None = None) -> GatewayServices:
    """Wire cache, limiter, transport and metrics into a pipeline."""
    targets = build_target_configs(settings)
    cache = ResponseCache(max_size=settings.cache_max_size, default_ttl=settings.cache_ttl)
    rate_limiter = FixedWindowRateLimiter(targets)
    transport = transport or Transport()
    metrics = MetricsCollector()
    pipeline = RequestPipeline(cache, rate_limiter, transport, targets, metrics)
    return GatewayServices(
        targets=targets,
        cache=cache,
        rate_limiter=rate_limiter,
        transport=transport,
        metrics=metrics,
        pipeline=pipeline,
    )
