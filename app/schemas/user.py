"""Pydantic schemas for dashboard users."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

UserRole = Literal["admin", "moderator", "user"]
UserStatus = Literal["active", "inactive", "banned", "pending"]

USER_ROLES: tuple[str, ...] = ("admin", "moderator", "user")
USER_STATUSES: tuple[str, ...] = ("active", "inactive", "banned", "pending")


class User(BaseModel):
    """A dashboard account as shown in the user-management table."""

    id: str
    email: str
    name: str
    avatar: str | None = None
    role: UserRole
    status: UserStatus
    last_active: datetime | None = Field(
        default=None,
        description="Last activity time; None for users who never signed in.",
    )
    created_at: datetime
    updated_at: datetime


class UserCreate(BaseModel):
    """Payload of the create-user form.

    Semantic checks (required name, email format, uniqueness) are done by
    the user service so they surface as 400/409 domain errors.
    """

    name: str = ""
    email: str = ""
    role: UserRole = "user"
    status: UserStatus = "active"


class UserUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""

    name: str | None = None
    email: str | None = None
    role: UserRole | None = None
    status: UserStatus | None = None


class BulkDeleteRequest(BaseModel):
    ids: list[str] = Field(..., min_length=1)


class BulkDeleteResult(BaseModel):
    deleted: list[str]
    not_found: list[str]
