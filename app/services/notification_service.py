"""Toast notification feed.

Services push a notification after each user-visible mutation; the dashboard
polls the feed, shows new items as toasts and dismisses them.
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Iterable

from app.adapters.simulation import NetworkSimulator
from app.core.errors import NotFoundAppError
from app.data.seed import utcnow
from app.schemas.notification import Notification, NotificationType

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MS: dict[str, int] = {
    "success": 5000,
    "info": 5000,
    "warning": 7000,
    "error": 8000,
}

DEFAULT_TITLES: dict[str, str] = {
    "success": "Success",
    "info": "Info",
    "warning": "Warning",
    "error": "Error",
}


class NotificationService:
    def __init__(
        self,
        simulator: NetworkSimulator,
        seed: Iterable[Notification] = (),
        max_items: int = 100,
    ) -> None:
        self._simulator = simulator
        self._max_items = max_items
        self._items: list[Notification] = list(seed)
        self._lock = threading.RLock()

    def push(
        self,
        type: NotificationType,
        message: str,
        *,
        title: str | None = None,
        duration: int | None = None,
    ) -> Notification:
        """Add a notification; title and duration default per type."""
        notification = Notification(
            id=uuid.uuid4().hex[:12],
            type=type,
            title=title or DEFAULT_TITLES[type],
            message=message,
            duration=DEFAULT_DURATION_MS[type] if duration is None else duration,
            created_at=utcnow(),
        )
        with self._lock:
            self._items.append(notification)
            if len(self._items) > self._max_items:
                self._items = self._items[-self._max_items :]
        return notification

    def success(self, message: str, title: str | None = None) -> Notification:
        return self.push("success", message, title=title)

    def error(self, message: str, title: str | None = None) -> Notification:
        return self.push("error", message, title=title)

    def warning(self, message: str, title: str | None = None) -> Notification:
        return self.push("warning", message, title=title)

    def info(self, message: str, title: str | None = None) -> Notification:
        return self.push("info", message, title=title)

    def _index_locked(self, notification_id: str) -> int:
        for index, item in enumerate(self._items):
            if item.id == notification_id:
                return index
        raise NotFoundAppError(
            code="notification_not_found",
            message="Notification not found",
            details={"resource": "notification", "resource_id": notification_id},
        )

    async def list(self, *, unread_only: bool = False) -> list[Notification]:
        await self._simulator.simulate("notifications.list", delay_ms=300)
        with self._lock:
            items = [n for n in self._items if not (unread_only and n.read)]
        items.reverse()
        return items

    async def mark_read(self, notification_id: str) -> Notification:
        await self._simulator.simulate("notifications.mark_read", delay_ms=200)
        with self._lock:
            index = self._index_locked(notification_id)
            updated = self._items[index].model_copy(update={"read": True})
            self._items[index] = updated
        return updated

    async def dismiss(self, notification_id: str) -> None:
        await self._simulator.simulate("notifications.dismiss", delay_ms=200)
        with self._lock:
            del self._items[self._index_locked(notification_id)]

    async def clear_all(self) -> int:
        await self._simulator.simulate("notifications.clear", delay_ms=200)
        with self._lock:
            count = len(self._items)
            self._items.clear()
        logger.info("notifications.cleared", extra={"count": count})
        return count
