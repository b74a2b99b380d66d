"""User management backed by an in-memory list.

Handles the user-management table: search/filter/sort/pagination through
the query engine, plus create, update, delete and bulk delete. Every
mutation is mirrored to the activity log and the notification feed.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Iterable

from app.adapters.simulation import NetworkSimulator
from app.core.errors import ConflictAppError, NotFoundAppError, ValidationAppError
from app.data.seed import avatar_for, utcnow
from app.schemas.user import BulkDeleteResult, User, UserCreate, UserUpdate
from app.services.activity_log import ActivityLog
from app.services.notification_service import NotificationService
from app.utils.query_engine import Page, QueryParams, apply_query
from app.utils.validators import email_error

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "email")
FILTERABLE_FIELDS = ("role", "status")
SORTABLE_FIELDS = ("name", "email", "role", "status", "created_at", "updated_at", "last_active")


def _not_found(user_id: str) -> NotFoundAppError:
    return NotFoundAppError(
        code="user_not_found",
        message="User not found",
        details={"resource": "user", "resource_id": user_id},
    )


class UserService:
    """CRUD and querying over the dashboard's users.

    Attributes:
        simulator: Injects latency and failures in front of every call.
    """

    def __init__(
        self,
        simulator: NetworkSimulator,
        activity: ActivityLog,
        notifications: NotificationService,
        seed: Iterable[User] = (),
    ) -> None:
        self.simulator = simulator
        self._activity = activity
        self._notifications = notifications
        self._users: list[User] = list(seed)
        self._lock = threading.RLock()
        next_id = max((int(u.id) for u in self._users if u.id.isdigit()), default=0) + 1
        self._ids = itertools.count(next_id)

    # Synchronous lookups used by the auth layer (no simulated latency).

    def find_by_email(self, email: str) -> User | None:
        needle = (email or "").strip().casefold()
        with self._lock:
            return next((u for u in self._users if u.email.casefold() == needle), None)

    def find_by_id(self, user_id: str) -> User | None:
        with self._lock:
            return next((u for u in self._users if u.id == user_id), None)

    def touch_last_active(self, user_id: str) -> User | None:
        with self._lock:
            index = self._index_locked(user_id)
            if index is None:
                return None
            updated = self._users[index].model_copy(update={"last_active": utcnow()})
            self._users[index] = updated
            return updated

    def count(self) -> int:
        with self._lock:
            return len(self._users)

    def _index_locked(self, user_id: str) -> int | None:
        for index, user in enumerate(self._users):
            if user.id == user_id:
                return index
        return None

    def _email_taken_locked(self, email: str, *, exclude_id: str | None = None) -> bool:
        needle = email.casefold()
        return any(u.email.casefold() == needle and u.id != exclude_id for u in self._users)

    @staticmethod
    def _validate_fields(name: str | None, email: str | None, *, partial: bool) -> None:
        errors: dict[str, str] = {}
        if not partial or name is not None:
            if not (name or "").strip():
                errors["name"] = "Name is required"
        if not partial or email is not None:
            problem = email_error(email)
            if problem:
                errors["email"] = problem
        if errors:
            raise ValidationAppError(
                code="invalid_user",
                message="; ".join(errors.values()),
                details={"fields": errors},
            )

    async def list_users(self, params: QueryParams) -> Page[User]:
        await self.simulator.simulate("users.list", delay_ms=600)
        with self._lock:
            snapshot = list(self._users)
        return apply_query(
            snapshot,
            params,
            search_fields=SEARCH_FIELDS,
            sortable=SORTABLE_FIELDS,
            filterable=FILTERABLE_FIELDS,
        )

    async def get_user(self, user_id: str) -> User:
        await self.simulator.simulate("users.get", delay_ms=400)
        user = self.find_by_id(user_id)
        if user is None:
            raise _not_found(user_id)
        return user

    async def create_user(self, data: UserCreate) -> User:
        await self.simulator.simulate("users.create", delay_ms=700)
        self._validate_fields(data.name, data.email, partial=False)
        name = data.name.strip()
        email = data.email.strip()

        with self._lock:
            if self._email_taken_locked(email):
                raise ConflictAppError(
                    code="duplicate_email",
                    message="Email already exists",
                    details={"field": "email"},
                )
            now = utcnow()
            user = User(
                id=str(next(self._ids)),
                email=email,
                name=name,
                avatar=avatar_for(name),
                role=data.role,
                status=data.status,
                last_active=None,
                created_at=now,
                updated_at=now,
            )
            self._users.append(user)

        logger.info("users.created", extra={"user_id": user.id, "role": user.role})
        self._activity.record("user_created", "New user created", user_id=user.id, user_name=user.name)
        self._notifications.success("User created successfully")
        return user

    async def update_user(self, user_id: str, data: UserUpdate) -> User:
        await self.simulator.simulate("users.update", delay_ms=600)
        changes = data.model_dump(exclude_none=True)
        self._validate_fields(changes.get("name"), changes.get("email"), partial=True)
        if "name" in changes:
            changes["name"] = changes["name"].strip()
        if "email" in changes:
            changes["email"] = changes["email"].strip()

        with self._lock:
            index = self._index_locked(user_id)
            if index is None:
                raise _not_found(user_id)
            if "email" in changes and self._email_taken_locked(changes["email"], exclude_id=user_id):
                raise ConflictAppError(
                    code="duplicate_email",
                    message="Email already exists",
                    details={"field": "email"},
                )
            current = self._users[index]
            updated = current.model_copy(update={**changes, "updated_at": utcnow()})
            self._users[index] = updated

        logger.info("users.updated", extra={"user_id": user_id, "fields": sorted(changes)})
        description = "User updated"
        if "role" in changes and changes["role"] != current.role:
            description = f"User role changed to {changes['role'].capitalize()}"
        self._activity.record("user_updated", description, user_id=user_id, user_name=updated.name)
        self._notifications.success("User updated successfully")
        return updated

    async def delete_user(self, user_id: str) -> User:
        await self.simulator.simulate("users.delete", delay_ms=500)
        with self._lock:
            index = self._index_locked(user_id)
            if index is None:
                raise _not_found(user_id)
            removed = self._users.pop(index)

        logger.info("users.deleted", extra={"user_id": user_id})
        self._activity.record("user_deleted", "User account deleted", user_id=user_id, user_name=removed.name)
        self._notifications.success("User deleted successfully")
        return removed

    async def bulk_delete(self, user_ids: list[str]) -> BulkDeleteResult:
        """Delete every listed user that exists; unknown ids are reported, not fatal."""
        await self.simulator.simulate("users.bulk_delete", delay_ms=800)
        deleted: list[str] = []
        not_found: list[str] = []
        with self._lock:
            for user_id in dict.fromkeys(user_ids):
                index = self._index_locked(user_id)
                if index is None:
                    not_found.append(user_id)
                    continue
                self._users.pop(index)
                deleted.append(user_id)

        logger.info("users.bulk_deleted", extra={"deleted": len(deleted), "not_found": len(not_found)})
        if deleted:
            self._activity.record("user_deleted", f"{len(deleted)} user accounts deleted")
            self._notifications.success(f"{len(deleted)} users deleted successfully")
        return BulkDeleteResult(deleted=deleted, not_found=not_found)
