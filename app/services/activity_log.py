"""Recent-activity feed shown on the overview page."""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from typing import Iterable

from app.data.seed import utcnow
from app.schemas.dashboard import ActivityItem, ActivityType

logger = logging.getLogger(__name__)


class ActivityLog:
    """In-memory ring buffer of activity items, newest served first."""

    def __init__(self, max_items: int = 200, seed: Iterable[ActivityItem] = ()) -> None:
        if max_items < 1:
            raise ValueError("max_items must be >= 1")
        self._items: deque[ActivityItem] = deque(seed, maxlen=max_items)
        self._lock = threading.Lock()
        next_id = max((int(i.id) for i in self._items if i.id.isdigit()), default=0) + 1
        self._ids = itertools.count(next_id)

    def __len__(self) -> int:
        return len(self._items)

    def record(
        self,
        type: ActivityType,
        description: str,
        *,
        user_id: str | None = None,
        user_name: str | None = None,
    ) -> ActivityItem:
        with self._lock:
            item = ActivityItem(
                id=str(next(self._ids)),
                type=type,
                description=description,
                user_id=user_id,
                user_name=user_name,
                timestamp=utcnow(),
            )
            self._items.append(item)
        logger.debug("activity.recorded", extra={"activity_type": type, "user_id": user_id})
        return item

    def recent(self, limit: int = 10) -> list[ActivityItem]:
        with self._lock:
            items = list(self._items)
        items.reverse()
        return items[: max(0, limit)]
