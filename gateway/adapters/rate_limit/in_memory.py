"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Windows start at the first request seen for a key, not on clock boundaries,
  so up to twice the limit can pass around a window edge.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from gateway.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class _RateWindow:
    window_start: float
    count: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per key in a fixed window.

    A window opens on the first request for a key and lasts window_seconds.
    A request arriving after the window has fully elapsed opens a new one with
    the counter reset to 1. Rejected requests do not touch the counter.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of admitted requests per window.
            window_seconds: Size of the fixed window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._windows: dict[str, _RateWindow] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def _is_elapsed(self, window: _RateWindow, now: float) -> bool:
        return now - window.window_start > self._window_seconds

    def _result(self, window: _RateWindow, *, allowed: bool, now: float) -> RateLimitResult:
        reset_at = window.window_start + self._window_seconds
        retry_after = None
        if not allowed:
            retry_after = max(1, int(math.ceil(reset_at - now)))
        return RateLimitResult(
            allowed=allowed,
            limit=self._limit,
            count=window.count,
            remaining=max(0, self._limit - window.count),
            reset_at=int(math.ceil(reset_at)),
            retry_after_seconds=retry_after,
        )

    def admit(self, key: str) -> RateLimitResult:
        """Count one request for key and decide whether it may proceed.

        Args:
            key: Unique identifier for rate limiting (``<client>:<path>``).

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()

        with self._lock:
            window = self._windows.get(key)

            if window is None or self._is_elapsed(window, now):
                window = _RateWindow(window_start=now, count=1)
                self._windows[key] = window
                return self._result(window, allowed=True, now=now)

            if window.count >= self._limit:
                return self._result(window, allowed=False, now=now)

            window.count += 1
            return self._result(window, allowed=True, now=now)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            stale = [k for k, w in self._windows.items() if self._is_elapsed(w, now)]
            for key in stale:
                del self._windows[key]
        return len(stale)

    def clear(self) -> None:
        """Forget every window."""
        with self._lock:
            self._windows.clear()
