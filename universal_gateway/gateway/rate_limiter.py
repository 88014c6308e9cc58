"""Fixed-window Rate Limiter: per-target request counting.

Each target gets a counter that resets to zero once its window has passed.
When the counter reaches the target's quota, further calls fail with
``RateLimitExceeded`` carrying the time left until the window resets.

Check-and-increment is serialized via asyncio.Lock (one lock per target).
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from universal_gateway.gateway.errors import RateLimitExceeded
from universal_gateway.gateway.types import DEFAULT_TARGET_CONFIGS, RateLimitConfig, TargetConfig

logger = logging.getLogger(__name__)


@dataclass
class _TargetWindow:
    """Fixed window state for a single target."""

    config: RateLimitConfig
    count: int = 0
    window_reset_at: float | None = None  # Set on first use
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def roll(self, now: float) -> None:
        """Start a fresh window if the current one has passed."""
        if self.window_reset_at is None or now > self.window_reset_at:
            self.count = 0
            self.window_reset_at = now + self.config.window_seconds


class FixedWindowRateLimiter:
    """Per-target fixed-window rate limiter.

    Usage:
        limiter = FixedWindowRateLimiter(target_configs)

        # Before sending a request (raises RateLimitExceeded when exhausted):
        await limiter.check_and_consume("github")
    """

    def __init__(
        self,
        configs: dict[str, TargetConfig] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        configs = configs or {}
        self._clock = clock
        self._windows: dict[str, _TargetWindow] = {
            name: _TargetWindow(config=config.rate_limit) for name, config in configs.items()
        }

    def _get_window(self, target: str) -> _TargetWindow:
        """Get or create the window for a target."""
        if target not in self._windows:
            default = DEFAULT_TARGET_CONFIGS.get(target)
            config = default.rate_limit if default else RateLimitConfig()
            self._windows[target] = _TargetWindow(config=config)
        return self._windows[target]

    async def check_and_consume(self, target: str) -> None:
        """Consume one slot in the target's window or raise RateLimitExceeded."""
        window = self._get_window(target)
        async with window.lock:
            now = self._clock()
            window.roll(now)

            if window.count >= window.config.requests:
                retry_after = window.window_reset_at - now
                logger.warning(
                    "Rate limit exceeded for %s (%d/%d), resets in %.1fs",
                    target,
                    window.count,
                    window.config.requests,
                    retry_after,
                )
                raise RateLimitExceeded(target, retry_after)

            window.count += 1

    def reset(self, target: str) -> None:
        """Manually clear a target's window."""
        window = self._get_window(target)
        window.count = 0
        window.window_reset_at = None
        logger.info("Rate limit window for %s manually RESET", target)

    def get_stats(self, target: str) -> dict:
        """Get current window stats for a target."""
        window = self._get_window(target)
        now = self._clock()
        resets_in = 0.0
        if window.window_reset_at is not None and now <= window.window_reset_at:
            resets_in = window.window_reset_at - now
        count = window.count if resets_in > 0 else 0
        return {
            "target": target,
            "count": count,
            "limit": window.config.requests,
            "remaining": max(window.config.requests - count, 0),
            "window_seconds": window.config.window_seconds,
            "resets_in_seconds": resets_in,
        }

    def get_all_stats(self) -> list[dict]:
        """Get stats for all known targets."""
        return [self.get_stats(t) for t in self._windows]
