"""Pydantic schemas for system settings, API keys and rate-limit status."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.schemas.user import UserRole

ApiKeyPermission = Literal["read", "write", "delete"]
API_KEY_PERMISSIONS: tuple[str, ...] = ("read", "write", "delete")


class SystemSettings(BaseModel):
    """Settings edited from the General and Security tabs."""

    site_name: str
    site_description: str
    maintenance_mode: bool
    allow_registration: bool
    require_email_verification: bool
    default_user_role: UserRole
    session_timeout: int = Field(..., description="Session lifetime in seconds.")
    max_login_attempts: int = Field(..., description="Failed logins allowed per email and window.")
    rate_limit_requests: int = Field(..., description="Requests allowed per rate-limit window.")
    rate_limit_window: int = Field(..., description="Rate-limit window in seconds.")


class SystemSettingsUpdate(BaseModel):
    site_name: str | None = None
    site_description: str | None = None
    maintenance_mode: bool | None = None
    allow_registration: bool | None = None
    require_email_verification: bool | None = None
    default_user_role: UserRole | None = None
    session_timeout: int | None = None
    max_login_attempts: int | None = None
    rate_limit_requests: int | None = None
    rate_limit_window: int | None = None


class ApiKey(BaseModel):
    """Full API key record, secret included."""

    id: str
    name: str
    key: str
    prefix: str
    created_at: datetime
    last_used_at: datetime | None = None
    expires_at: datetime | None = None
    permissions: list[ApiKeyPermission]
    is_active: bool = True


class ApiKeyPublic(BaseModel):
    """API key as listed in the settings table: the secret is masked."""

    id: str
    name: str
    prefix: str
    created_at: datetime
    last_used_at: datetime | None = None
    expires_at: datetime | None = None
    permissions: list[ApiKeyPermission]
    is_active: bool


class ApiKeyCreate(BaseModel):
    name: str = ""
    permissions: list[str] = Field(default_factory=lambda: ["read"])


class RateLimitStatus(BaseModel):
    limit: int
    remaining: int
    window_seconds: float
    reset_at: int
    enabled: bool
