"""
Fixed-window rate limiter for sidecar endpoints.

State lives in process memory and is only touched from the event loop, so
no locking is needed. Counts reset when the process restarts.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict

from shared.logging import get_logger

# Sweep expired windows once the table grows past this many keys.
SWEEP_THRESHOLD = 10000


@dataclass
class _Window:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a rate limit check."""
    allowed: bool
    remaining: int
    reset_at: float

    def retry_after(self, now: float) -> int:
        """Whole seconds until the window resets, never less than one."""
        return max(1, int(self.reset_at - now + 0.999))


class FixedWindowRateLimiter:
    """Counts requests per key in fixed windows."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.logger = get_logger("sidecar.rate_limiter")
        self._windows: Dict[str, _Window] = {}

    @property
    def enabled(self) -> bool:
        return self.max_requests > 0

    def _sweep(self, now: float) -> None:
        expired = [key for key, window in self._windows.items() if window.reset_at <= now]
        for key in expired:
            del self._windows[key]

    def check(self, key: str) -> RateLimitDecision:
        """Count one request against ``key`` and decide whether it may proceed."""
        now = self.clock()
        if not self.enabled:
            return RateLimitDecision(allowed=True, remaining=0, reset_at=now)

        if len(self._windows) > SWEEP_THRESHOLD:
            self._sweep(now)

        window = self._windows.get(key)
        if window is None or window.reset_at <= now:
            window = _Window(count=1, reset_at=now + self.window_seconds)
            self._windows[key] = window
            return RateLimitDecision(
                allowed=True,
                remaining=self.max_requests - 1,
                reset_at=window.reset_at,
            )

        if window.count >= self.max_requests:
            self.logger.warning("Rate limit exceeded", key=key, limit=self.max_requests)
            return RateLimitDecision(allowed=False, remaining=0, reset_at=window.reset_at)

        window.count += 1
        return RateLimitDecision(
            allowed=True,
            remaining=self.max_requests - window.count,
            reset_at=window.reset_at,
        )

    def reset(self, key: str) -> None:
        """Forget the window for ``key``."""
        self._windows.pop(key, None)

    def __len__(self) -> int:
        return len(self._windows)
