"""Periodic cache maintenance, run as a background asyncio task."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from universal_gateway.gateway.cache import ResponseCache
from universal_gateway.gateway.metrics_collector import MetricsCollector

logger = logging.getLogger(__name__)


def sweep_cache(cache: ResponseCache, metrics: MetricsCollector | None = None) -> int:
    """Drop expired entries and refresh the cache snapshot in metrics."""
    cleaned = cache.cleanup()
    if metrics is not None:
        metrics.update_cache_stats(cache.get_stats())
    return cleaned


async def run_cache_cleanup(
    cache: ResponseCache,
    metrics: MetricsCollector | None = None,
    interval: float = 600.0,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> None:
    """Sweep the cache every ``interval`` seconds until cancelled."""
    logger.info("Cache cleanup task started (every %.0fs)", interval)
    while True:
        await sleep(interval)
        sweep_cache(cache, metrics)
