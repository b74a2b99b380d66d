"""In-memory key/value store with per-entry expiry.

Holds auth sessions and refresh tokens. Thread-safe and easy to swap for
Redis while keeping the same interface and behaviors.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class StoreItem(Generic[V]):
    """Container for stored values with expiration metadata."""

    value: V
    expires_at: float


class TTLStore(Generic[V]):
    """Thread-safe, in-memory store where every entry carries its own expiry.

    Attributes:
        default_ttl_seconds: TTL used when ``set`` is called without one.
        max_entries: Maximum number of items (None for unlimited); the least
            recently used entry is evicted first.
    """

    def __init__(
        self,
        default_ttl_seconds: float = 3600,
        max_entries: int | None = 10_000,
        *,
        clock: Callable[[], float] = time.time,
        name: str = "ttl_store",
    ) -> None:
        self._default_ttl = default_ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._name = name
        self._store: OrderedDict[str, StoreItem[V]] = OrderedDict()
        self._lock = threading.RLock()

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"TTLStore(name={self._name!r}, default_ttl_seconds={self._default_ttl}, "
            f"max_entries={self._max_entries}, size={len(self._store)})"
        )

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired_locked()
            return len(self._store)

    def get(self, key: str) -> V | None:
        """Return the live value for ``key``, or None if absent or expired."""

        item = self.get_item(key)
        return item.value if item else None

    def get_item(self, key: str) -> StoreItem[V] | None:
        """Like :meth:`get` but also exposes the expiry timestamp."""

        with self._lock:
            item = self._store.get(key)
            if item is None:
                return None
            if self._is_expired(item):
                self._store.pop(key, None)
                logger.debug("store.expired", extra={"store": self._name})
                return None
            self._store.move_to_end(key)
            return item

    def is_expired(self, key: str) -> bool:
        """True when ``key`` exists but its TTL has passed (the entry is kept)."""

        with self._lock:
            item = self._store.get(key)
            return item is not None and self._is_expired(item)

    def set(self, key: str, value: V, ttl_seconds: float | None = None) -> float:
        """Store a value and return its absolute expiry (UNIX seconds)."""

        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            expires_at = self._clock() + ttl
            self._store[key] = StoreItem(value=value, expires_at=expires_at)
            self._store.move_to_end(key)
            self._evict_if_over_capacity_locked()
            return expires_at

    def pop(self, key: str) -> V | None:
        """Remove ``key`` regardless of expiry and return its value."""

        with self._lock:
            item = self._store.pop(key, None)
            return item.value if item else None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def _evict_expired_locked(self) -> None:
        expired_keys = [k for k, item in self._store.items() if self._is_expired(item)]
        for key in expired_keys:
            self._store.pop(key, None)

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_entries is None:
            return

        while len(self._store) > self._max_entries:
            # popitem(last=False) removes the least recently used entry
            self._store.popitem(last=False)

    def _is_expired(self, item: StoreItem[V]) -> bool:
        return self._clock() >= item.expires_at
