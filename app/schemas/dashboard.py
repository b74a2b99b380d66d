"""Pydantic schemas for the overview page and the activity feed."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

ServerLoadStatus = Literal["stable", "warning", "critical"]
ActivityType = Literal[
    "user_created",
    "user_updated",
    "user_deleted",
    "login",
    "logout",
    "api_call",
    "error",
]


class DashboardStats(BaseModel):
    total_users: int
    total_users_change: float = Field(..., description="Percent change vs. previous period.")
    revenue: float
    revenue_change: float
    active_sessions: int
    active_sessions_change: float
    server_load: int = Field(..., ge=0, le=100, description="Percent CPU load.")
    server_load_status: ServerLoadStatus


class ChartDataPoint(BaseModel):
    """One point of a chart series; ``value2`` carries an optional second series."""

    name: str
    value: float
    value2: float | None = None
    date: str | None = None


class ActivityItem(BaseModel):
    id: str
    type: ActivityType
    description: str
    user_id: str | None = None
    user_name: str | None = None
    timestamp: datetime
