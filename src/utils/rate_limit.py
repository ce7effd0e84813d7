"""In-memory per-client rate limiting.

Two limiters:
- FixedWindowRateLimiter: count/reset_at bucket per identifier, applied to
  every endpoint.
- MinIntervalRateLimiter: minimum spacing between consecutive requests of one
  identifier, applied on top of the bucket limiter to generation endpoints.

State is process-local and advisory; losing it only resets allowances.
Expired entries are swept lazily on lookup, there is no background timer.
A missing or empty identifier is always allowed.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

Clock = Callable[[], float]


@dataclass
class RateLimitBucket:
    count: int
    reset_at: float


def _format_window(seconds: float) -> str:
    if seconds % 60 == 0:
        minutes = int(seconds // 60)
        return "minute" if minutes == 1 else f"{minutes} minutes"
    return f"{seconds:g} seconds"


class FixedWindowRateLimiter:
    """Fixed-window request counter keyed by client identifier."""

    def __init__(self, limit: int = 60, window_seconds: float = 300, clock: Clock = time.monotonic) -> None:
        """Initialize the limiter.

        Args:
            limit: Requests allowed per identifier per window.
            window_seconds: Window length in seconds.
            clock: Monotonic time source (injected by tests).
        """
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._buckets: Dict[str, RateLimitBucket] = {}
        self._lock = threading.Lock()

    def allow(self, identifier: Optional[str]) -> bool:
        """Count the request and report whether it is within the allowance."""
        if not identifier:
            return True

        with self._lock:
            now = self._clock()
            self._sweep(now)
            bucket = self._buckets.get(identifier)
            if bucket is None or now >= bucket.reset_at:
                self._buckets[identifier] = RateLimitBucket(count=1, reset_at=now + self.window_seconds)
                return True
            if bucket.count >= self.limit:
                return False
            bucket.count += 1
            return True

    def _sweep(self, now: float) -> None:
        expired = [key for key, bucket in self._buckets.items() if now >= bucket.reset_at]
        for key in expired:
            del self._buckets[key]

    def __len__(self) -> int:
        return len(self._buckets)

    def hint(self) -> str:
        return f"Limited to {self.limit} requests every {_format_window(self.window_seconds)} per IP."


class MinIntervalRateLimiter:
    """Single-token limiter: one request per identifier every min_interval seconds."""

    def __init__(self, min_interval: float = 2, clock: Clock = time.monotonic) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def allow(self, identifier: Optional[str]) -> bool:
        """Allow when the previous accepted request is at least min_interval old."""
        if not identifier or self.min_interval <= 0:
            return True

        with self._lock:
            now = self._clock()
            self._sweep(now)
            last = self._last_seen.get(identifier)
            if last is not None and now - last < self.min_interval:
                return False
            self._last_seen[identifier] = now
            return True

    def _sweep(self, now: float) -> None:
        expired = [key for key, last in self._last_seen.items() if now - last >= self.min_interval]
        for key in expired:
            del self._last_seen[key]

    def __len__(self) -> int:
        return len(self._last_seen)

    def hint(self) -> str:
        return f"Limited to one request every {self.min_interval:g} seconds per IP."
