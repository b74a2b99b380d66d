"""API key management for the settings page.

Keys are listed masked, revealed on demand, created with a permission set
and revoked by flipping ``is_active``. Active keys also authenticate API
requests through the ``X-API-Key`` header.
"""

from __future__ import annotations

import hashlib
import hmac
import itertools
import logging
import secrets
import threading
from typing import Iterable

from app.adapters.simulation import NetworkSimulator
from app.core.errors import NotFoundAppError, ValidationAppError
from app.data.seed import utcnow
from app.schemas.settings import API_KEY_PERMISSIONS, ApiKey, ApiKeyPublic
from app.services.activity_log import ActivityLog
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

KEY_PREFIX = "sk_live_"
VISIBLE_PREFIX_CHARS = 12


def mask_key(raw_key: str) -> str:
    return f"{raw_key[:VISIBLE_PREFIX_CHARS]}..."


def hash_key(raw_key: str) -> str:
    """Short fingerprint for logs; never log the key itself."""
    return hashlib.sha256(raw_key.encode()).hexdigest()[:16]


def to_public(api_key: ApiKey) -> ApiKeyPublic:
    return ApiKeyPublic(**api_key.model_dump(exclude={"key"}))


class ApiKeyService:
    def __init__(
        self,
        simulator: NetworkSimulator,
        activity: ActivityLog,
        notifications: NotificationService,
        seed: Iterable[ApiKey] = (),
    ) -> None:
        self._simulator = simulator
        self._activity = activity
        self._notifications = notifications
        self._keys: list[ApiKey] = list(seed)
        self._lock = threading.RLock()
        next_id = max((int(k.id) for k in self._keys if k.id.isdigit()), default=0) + 1
        self._ids = itertools.count(next_id)

    def _find_locked(self, key_id: str) -> int:
        for index, api_key in enumerate(self._keys):
            if api_key.id == key_id:
                return index
        raise NotFoundAppError(
            code="api_key_not_found",
            message="API key not found",
            details={"resource": "api_key", "resource_id": key_id},
        )

    async def list(self) -> list[ApiKeyPublic]:
        await self._simulator.simulate("api_keys.list", delay_ms=500)
        with self._lock:
            return [to_public(k) for k in self._keys]

    async def reveal(self, key_id: str) -> ApiKey:
        await self._simulator.simulate("api_keys.reveal", delay_ms=200)
        with self._lock:
            return self._keys[self._find_locked(key_id)]

    async def create(self, name: str, permissions: list[str]) -> ApiKey:
        """Create a key; the response is the only listing that carries the full secret."""
        await self._simulator.simulate("api_keys.create", delay_ms=700)

        name = (name or "").strip()
        if not name:
            raise ValidationAppError(
                code="invalid_api_key_name",
                message="Key name is required",
                details={"field": "name"},
            )
        unknown = [p for p in permissions if p not in API_KEY_PERMISSIONS]
        if unknown or not permissions:
            raise ValidationAppError(
                code="invalid_api_key_permissions",
                message="Select at least one of: " + ", ".join(API_KEY_PERMISSIONS),
                details={"field": "permissions", "allowed": list(API_KEY_PERMISSIONS)},
            )
        ordered = [p for p in API_KEY_PERMISSIONS if p in permissions]

        raw_key = KEY_PREFIX + secrets.token_urlsafe(24)
        with self._lock:
            api_key = ApiKey(
                id=str(next(self._ids)),
                name=name,
                key=raw_key,
                prefix=mask_key(raw_key),
                created_at=utcnow(),
                permissions=ordered,  # type: ignore[arg-type]
                is_active=True,
            )
            self._keys.append(api_key)

        logger.info(
            "api_keys.created",
            extra={"api_key_id": api_key.id, "key_hash": hash_key(raw_key), "permissions": ordered},
        )
        self._activity.record("api_call", f"API key '{name}' created")
        self._notifications.success("API key created successfully")
        return api_key

    async def revoke(self, key_id: str) -> ApiKeyPublic:
        """Deactivate a key; revoking an inactive key is a no-op."""
        await self._simulator.simulate("api_keys.revoke", delay_ms=500)
        with self._lock:
            index = self._find_locked(key_id)
            current = self._keys[index]
            if current.is_active:
                current = current.model_copy(update={"is_active": False})
                self._keys[index] = current
                changed = True
            else:
                changed = False

        if changed:
            logger.info("api_keys.revoked", extra={"api_key_id": key_id})
            self._activity.record("api_call", f"API key '{current.name}' revoked")
        self._notifications.success("API key revoked successfully")
        return to_public(current)

    def authenticate(self, raw_key: str) -> ApiKey | None:
        """Return the active, unexpired key matching ``raw_key`` and stamp its last use."""
        if not raw_key:
            return None
        now = utcnow()
        with self._lock:
            for index, api_key in enumerate(self._keys):
                if not hmac.compare_digest(api_key.key.encode(), raw_key.encode()):
                    continue
                if not api_key.is_active:
                    return None
                if api_key.expires_at is not None and api_key.expires_at <= now:
                    return None
                stamped = api_key.model_copy(update={"last_used_at": now})
                self._keys[index] = stamped
                return stamped
        return None
