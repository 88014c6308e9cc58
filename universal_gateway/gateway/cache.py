"""Response Cache: bounded in-memory store with TTL expiry and LRU eviction.

Entries expire lazily: an expired entry is treated as a miss on read and
removed at that point, or swept in bulk by ``cleanup()`` from a background
timer. When a new key arrives at capacity, the least recently used entry is
evicted first.

Not thread-safe, but safe for asyncio single-threaded concurrency (no method
suspends).
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass
from typing import Any

from universal_gateway.core.metrics import CACHE_EVENTS
from universal_gateway.gateway.types import CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 100
DEFAULT_TTL = 300.0  # 5 minutes
ENTRY_OVERHEAD_BYTES = 100  # Rough per-entry bookkeeping estimate


@dataclass
class _CacheCounters:
    hits: int = 0
    misses: int = 0
    sets: int = 0
    evictions: int = 0
    total_requests: int = 0


class ResponseCache:
    """Key/value cache for upstream responses.

    Usage:
        cache = ResponseCache(max_size=100, default_ttl=300)
        key = cache.generate_key("github", "/users/octocat", {})
        data = cache.get(key)
        if data is None:
            data = await fetch()
            cache.set(key, data, ttl=600)
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        default_ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        # Insertion order doubles as recency order: keys are re-inserted on access
        self._access_times: dict[str, float] = {}
        self._counters = _CacheCounters()

    @staticmethod
    def generate_key(api_name: str, endpoint: str, params: Mapping[str, Any] | None = None) -> str:
        """Build a deterministic key; parameter order does not matter."""
        params = params or {}
        sorted_params = "&".join(f"{name}={params[name]}" for name in sorted(params))
        return f"{api_name}:{endpoint}:{sorted_params}"

    def __len__(self) -> int:
        return len(self._entries)

    def _touch(self, key: str, now: float) -> None:
        self._access_times.pop(key, None)
        self._access_times[key] = now

    def _remove(self, key: str) -> bool:
        self._access_times.pop(key, None)
        return self._entries.pop(key, None) is not None

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss or expired entry."""
        self._counters.total_requests += 1

        entry = self._entries.get(key)
        if entry is None:
            self._counters.misses += 1
            CACHE_EVENTS.labels(event="miss").inc()
            return None

        now = self._clock()
        if entry.is_expired(now):
            self._remove(key)
            self._counters.misses += 1
            CACHE_EVENTS.labels(event="expired").inc()
            return None

        self._touch(key, now)
        self._counters.hits += 1
        CACHE_EVENTS.labels(event="hit").inc()
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store a value. ``ttl=None`` uses the default TTL."""
        now = self._clock()
        actual_ttl = self.default_ttl if ttl is None else ttl

        if key not in self._entries and len(self._entries) >= self.max_size:
            self.evict_lru()

        self._entries[key] = CacheEntry(value=value, created_at=now, expires_at=now + actual_ttl)
        self._touch(key, now)
        self._counters.sets += 1
        CACHE_EVENTS.labels(event="set").inc()

    def evict_lru(self) -> str | None:
        """Evict the least recently used entry. Returns the evicted key."""
        if not self._access_times:
            return None

        # min() keeps the first of equal timestamps, i.e. the least recently touched
        oldest_key = min(self._access_times, key=self._access_times.__getitem__)
        self._remove(oldest_key)
        self._counters.evictions += 1
        CACHE_EVENTS.labels(event="eviction").inc()
        logger.debug("Evicted LRU cache entry %s", oldest_key)
        return oldest_key

    def cleanup(self) -> int:
        """Remove every expired entry. Returns the count removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            self._remove(key)
        if expired:
            logger.info("Cache cleanup removed %d expired entries", len(expired))
        return len(expired)

    def has(self, key: str) -> bool:
        """Check presence without touching access order or counters."""
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry.is_expired(self._clock()):
            self._remove(key)
            return False
        return True

    def delete(self, key: str) -> bool:
        """Remove a single entry. Returns True if it existed."""
        return self._remove(key)

    def clear(self) -> None:
        """Drop all entries and reset all counters."""
        removed = len(self._entries)
        self._entries.clear()
        self._access_times.clear()
        self._counters = _CacheCounters()
        logger.info("Cache cleared (%d entries removed)", removed)

    def estimate_memory_usage(self) -> int:
        """Approximate footprint in bytes. Diagnostic only."""
        total = 0
        for key, entry in self._entries.items():
            total += len(json.dumps(key))
            total += len(json.dumps(entry.value, default=str))
            total += ENTRY_OVERHEAD_BYTES
        return total

    def get_stats(self) -> dict:
        """Counters plus derived hit rate, size and memory estimate."""
        counters = asdict(self._counters)
        total = self._counters.total_requests
        return {
            **counters,
            "hit_rate": self._counters.hits / total if total > 0 else 0.0,
            "size": len(self._entries),
            "max_size": self.max_size,
            "memory_usage": self.estimate_memory_usage(),
        }
