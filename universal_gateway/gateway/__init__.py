"""API Gateway Layer.

Relays requests to upstream REST APIs with:
  - Response Cache (TTL expiry, LRU eviction, hit/miss counters)
  - Fixed-window Rate Limiter (per target)
  - Resilient Transport (exponential backoff retries)
  - Request Pipeline (cache -> limiter -> transport -> cache-fill)
  - Metrics Collector (outcomes, latency, errors)
"""
