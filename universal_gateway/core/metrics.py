"""Prometheus metrics for the gateway."""

from fastapi.responses import Response
from prometheus_client import Counter, Histogram, Info, generate_latest

# --- Metrics ---

APP_INFO = Info("gateway", "Universal API Gateway application info")
APP_INFO.info({"version": "1.0.0", "name": "universal_gateway"})

GATEWAY_CALLS = Counter(
    "gateway_calls_total",
    "Total logical gateway calls",
    ["target", "call_name", "outcome"],
)

GATEWAY_CALL_DURATION = Histogram(
    "gateway_call_duration_seconds",
    "Logical gateway call duration in seconds",
    ["target"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30],
)

GATEWAY_ERRORS = Counter(
    "gateway_errors_total",
    "Gateway call failures by kind",
    ["target", "kind"],
)

CACHE_EVENTS = Counter(
    "gateway_cache_events_total",
    "Response cache events",
    ["event"],  # hit, miss, set, eviction, expired
)


def metrics_response() -> Response:
    """Generate Prometheus /metrics response."""
    return Response(
        content=generate_latest(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
