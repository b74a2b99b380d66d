"""Pydantic schemas for toast notifications and navigation."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.schemas.user import UserRole

NotificationType = Literal["success", "error", "warning", "info"]


class Notification(BaseModel):
    id: str
    type: NotificationType
    title: str
    message: str
    duration: int = Field(..., description="Auto-dismiss delay in ms; 0 keeps the toast open.")
    dismissible: bool = True
    read: bool = False
    created_at: datetime


class NotificationCreate(BaseModel):
    type: NotificationType = "info"
    message: str = Field(..., min_length=1)
    title: str | None = None
    duration: int | None = Field(default=None, ge=0)


class NavItem(BaseModel):
    id: str
    label: str
    icon: str
    path: str
    required_roles: list[UserRole] | None = None
