"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import math
import threading
import time
from collections import deque
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per key over a trailing time window.

    Every call to :meth:`consume` is recorded, including rejected ones, so a
    client that keeps retrying while blocked stays blocked until its own
    traffic ages out of the window.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of requests allowed inside the window.
            window_seconds: Length of the trailing window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._hits_by_key: dict[str, deque[float]] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _prune_locked(self, key: str, now: float) -> deque[float]:
        """Drop timestamps that fell out of the window and return what is left."""
        hits = self._hits_by_key.get(key)
        if hits is None:
            return deque()
        window_start = now - self._window_seconds
        while hits and hits[0] <= window_start:
            hits.popleft()
        if not hits:
            del self._hits_by_key[key]
        return hits

    def _build_result(self, hits: deque[float], now: float, *, allowed: bool) -> RateLimitResult:
        count = len(hits)
        remaining = max(0, self._limit - count)
        reset_at = int(math.ceil(hits[0] + self._window_seconds)) if hits else int(now)

        retry_after: int | None = None
        if not allowed:
            # The next request fits once the hit at this index has aged out.
            boundary = hits[count - self._limit]
            retry_after = max(0, int(math.ceil(boundary + self._window_seconds - now)))

        return RateLimitResult(
            allowed=allowed,
            limit=self._limit,
            remaining=remaining,
            reset_at=reset_at,
            retry_after_seconds=retry_after,
        )

    @staticmethod
    def _check_key(key: str) -> None:
        if not key:
            raise ValueError("key must be a non-empty string")

    def consume(self, key: str) -> RateLimitResult:
        """Record a request for ``key`` and decide whether it is allowed.

        Args:
            key: Unique identifier for rate limiting.

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        self._check_key(key)
        now = self._clock()

        with self._lock:
            hits = self._prune_locked(key, now)
            hits.append(now)
            self._hits_by_key[key] = hits
            return self._build_result(hits, now, allowed=len(hits) <= self._limit)

    def peek(self, key: str) -> RateLimitResult:
        """Report the budget left for ``key``; ``allowed`` tells whether one more request would pass."""
        self._check_key(key)
        now = self._clock()

        with self._lock:
            hits = self._prune_locked(key, now)
            return self._build_result(hits, now, allowed=len(hits) < self._limit)

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._hits_by_key.clear()
            else:
                self._hits_by_key.pop(key, None)
