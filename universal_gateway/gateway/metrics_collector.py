"""Metrics Collector: per-call outcome and latency aggregation.

Each logical call is bracketed by ``start_call`` and ``record_success`` /
``record_failure``. Counters are kept overall, per target and per call name;
latencies are folded into sum/min/max and a rolling history of the 100 most
recent samples. ``report()`` derives the human-facing view without mutating
anything. Counters are mirrored into Prometheus for scraping.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import deque
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from universal_gateway.core.metrics import GATEWAY_CALL_DURATION, GATEWAY_CALLS, GATEWAY_ERRORS
from universal_gateway.gateway.errors import error_kind_of

logger = logging.getLogger(__name__)

LATENCY_HISTORY_SIZE = 100


def _log_fields(context: CallContext, duration_ms: float) -> dict:
    return {
        "request_id": context.request_id,
        "target": context.target,
        "call_name": context.call_name,
        "duration_ms": round(duration_ms, 2),
    }


@dataclass(frozen=True)
class CallContext:
    """Identifies one in-progress logical call."""

    target: str
    call_name: str
    started_at: float
    request_id: str = field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


@dataclass
class _OutcomeCounts:
    total: int = 0
    successful: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return {"total": self.total, "successful": self.successful, "failed": self.failed}


@dataclass
class _MetricsState:
    """Raw process-wide aggregates."""

    started_at: float
    calls: _OutcomeCounts = field(default_factory=_OutcomeCounts)
    by_target: dict[str, _OutcomeCounts] = field(default_factory=dict)
    by_call: dict[str, _OutcomeCounts] = field(default_factory=dict)

    # Latency (milliseconds)
    latency_sum: float = 0.0
    latency_count: int = 0
    latency_min: float | None = None
    latency_max: float = 0.0
    latency_history: deque[float] = field(default_factory=lambda: deque(maxlen=LATENCY_HISTORY_SIZE))

    errors_total: int = 0
    errors_by_kind: dict[str, int] = field(default_factory=dict)
    errors_by_target: dict[str, int] = field(default_factory=dict)

    cache: dict = field(default_factory=dict)


class MetricsCollector:
    """In-process gateway metrics.

    Usage:
        metrics = MetricsCollector()

        ctx = metrics.start_call("github", "github-get-user")
        try:
            ...
        except Exception as e:
            metrics.record_failure(ctx, e)
            raise
        else:
            metrics.record_success(ctx)

    or, equivalently:

        async with metrics.track("github", "github-get-user"):
            ...
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._state = _MetricsState(started_at=clock())

    def start_call(self, target: str, call_name: str) -> CallContext:
        return CallContext(target=target, call_name=call_name, started_at=self._clock())

    def record_success(self, context: CallContext) -> float:
        """Record a successful call. Returns its duration in milliseconds."""
        duration_ms = self._record(context, success=True)
        GATEWAY_CALLS.labels(target=context.target, call_name=context.call_name, outcome="success").inc()
        logger.debug(
            "[METRICS] %s:%s completed in %.1fms",
            context.target,
            context.call_name,
            duration_ms,
            extra=_log_fields(context, duration_ms),
        )
        return duration_ms

    def record_failure(self, context: CallContext, error: BaseException | str) -> float:
        """Record a failed call under the error's kind. Returns its duration in milliseconds."""
        duration_ms = self._record(context, success=False)
        kind = error_kind_of(error)

        state = self._state
        state.errors_total += 1
        state.errors_by_kind[kind] = state.errors_by_kind.get(kind, 0) + 1
        state.errors_by_target[context.target] = state.errors_by_target.get(context.target, 0) + 1

        GATEWAY_CALLS.labels(target=context.target, call_name=context.call_name, outcome="failure").inc()
        GATEWAY_ERRORS.labels(target=context.target, kind=kind).inc()
        logger.warning(
            "[METRICS] %s:%s failed in %.1fms - %s",
            context.target,
            context.call_name,
            duration_ms,
            error,
            extra=_log_fields(context, duration_ms),
        )
        return duration_ms

    @asynccontextmanager
    async def track(self, target: str, call_name: str) -> AsyncIterator[CallContext]:
        """Record success or failure of the wrapped block. Failures are re-raised."""
        context = self.start_call(target, call_name)
        try:
            yield context
        except Exception as e:
            self.record_failure(context, e)
            raise
        self.record_success(context)

    def _record(self, context: CallContext, success: bool) -> float:
        duration_ms = max(self._clock() - context.started_at, 0.0) * 1000
        state = self._state

        for counts in (
            state.calls,
            state.by_target.setdefault(context.target, _OutcomeCounts()),
            state.by_call.setdefault(context.call_name, _OutcomeCounts()),
        ):
            counts.total += 1
            if success:
                counts.successful += 1
            else:
                counts.failed += 1

        state.latency_sum += duration_ms
        state.latency_count += 1
        if state.latency_min is None or duration_ms < state.latency_min:
            state.latency_min = duration_ms
        if duration_ms > state.latency_max:
            state.latency_max = duration_ms
        state.latency_history.append(duration_ms)

        GATEWAY_CALL_DURATION.labels(target=context.target).observe(duration_ms / 1000)
        return duration_ms

    def update_cache_stats(self, cache_stats: dict) -> None:
        """Keep a snapshot of cache counters for reports."""
        self._state.cache = {
            "hits": cache_stats.get("hits", 0),
            "misses": cache_stats.get("misses", 0),
            "hit_rate": cache_stats.get("hit_rate", 0.0),
            "size": cache_stats.get("size", 0),
            "memory_usage": cache_stats.get("memory_usage", 0),
        }

    def report(self) -> dict:
        """Derived snapshot of all metrics. Does not mutate state."""
        state = self._state
        total = state.calls.total
        avg = state.latency_sum / state.latency_count if state.latency_count else 0.0

        return {
            "summary": {
                "uptime_seconds": round(self._clock() - state.started_at, 3),
                "total_requests": total,
                "successful": state.calls.successful,
                "failed": state.calls.failed,
                "success_rate": state.calls.successful / total if total else 0.0,
                "avg_response_time_ms": round(avg, 2),
            },
            "requests": {
                **state.calls.to_dict(),
                "by_api": {name: c.to_dict() for name, c in state.by_target.items()},
                "by_tool": {name: c.to_dict() for name, c in state.by_call.items()},
            },
            "performance": {
                "avg_response_time_ms": round(avg, 2),
                "min_response_time_ms": round(state.latency_min, 2) if state.latency_min is not None else None,
                "max_response_time_ms": round(state.latency_max, 2),
                "samples": state.latency_count,
                "recent_response_times_ms": [round(d, 2) for d in state.latency_history],
            },
            "errors": {
                "total": state.errors_total,
                "by_type": dict(state.errors_by_kind),
                "by_api": dict(state.errors_by_target),
            },
            "cache": dict(state.cache),
        }

    def reset(self) -> None:
        """Zero every counter and restart the uptime clock."""
        self._state = _MetricsState(started_at=self._clock())
        logger.info("Metrics reset")
