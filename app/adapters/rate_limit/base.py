"""Rate limiter interfaces.

The HTTP layer and the login throttle depend on this abstraction (not the
concrete implementation) so the storage backend can be swapped later
(e.g., Redis) with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check/consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the oldest counted request leaves the window.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @property
    @abstractmethod
    def limit(self) -> int:
        """Maximum number of requests per window."""

    @property
    @abstractmethod
    def window_seconds(self) -> float:
        """Length of the window in seconds."""

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Record one request for a key and decide whether it is allowed.

        Args:
            key: Unique identifier (e.g., user id, API key id, IP address).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def peek(self, key: str) -> RateLimitResult:
        """Report the current budget for a key without recording a request."""
        raise NotImplementedError

    @abstractmethod
    def reset(self, key: str | None = None) -> None:
        """Forget the history of one key, or of every key when omitted."""
        raise NotImplementedError
