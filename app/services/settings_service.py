"""System settings edited from the General and Security tabs."""

from __future__ import annotations

import logging
import threading

from app.adapters.simulation import NetworkSimulator
from app.core.errors import ValidationAppError
from app.schemas.settings import SystemSettings, SystemSettingsUpdate
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

_POSITIVE_INT_FIELDS = (
    "session_timeout",
    "max_login_attempts",
    "rate_limit_requests",
    "rate_limit_window",
)


class SettingsService:
    def __init__(
        self,
        simulator: NetworkSimulator,
        notifications: NotificationService,
        initial: SystemSettings,
    ) -> None:
        self._simulator = simulator
        self._notifications = notifications
        self._settings = initial
        self._lock = threading.Lock()

    @property
    def current(self) -> SystemSettings:
        """Settings snapshot for internal readers (no simulated latency)."""
        with self._lock:
            return self._settings

    async def get(self) -> SystemSettings:
        await self._simulator.simulate("settings.get", delay_ms=400)
        return self.current

    async def update(self, patch: SystemSettingsUpdate) -> SystemSettings:
        await self._simulator.simulate("settings.update", delay_ms=600)
        changes = patch.model_dump(exclude_none=True)

        errors: dict[str, str] = {}
        if "site_name" in changes:
            changes["site_name"] = changes["site_name"].strip()
            if not changes["site_name"]:
                errors["site_name"] = "Site name is required"
        for name in _POSITIVE_INT_FIELDS:
            if name in changes and changes[name] < 1:
                errors[name] = "Must be a positive integer"
        if errors:
            raise ValidationAppError(
                code="invalid_settings",
                message="Some settings are invalid",
                details={"fields": errors},
            )

        with self._lock:
            self._settings = self._settings.model_copy(update=changes)
            updated = self._settings

        logger.info("settings.updated", extra={"fields": sorted(changes)})
        self._notifications.success("Settings saved successfully")
        return updated
