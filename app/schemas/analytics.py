"""Pydantic schemas for the analytics page."""

from __future__ import annotations

from pydantic import BaseModel


class AnalyticsOverview(BaseModel):
    page_views: int
    page_views_change: float
    unique_visitors: int
    unique_visitors_change: float
    avg_session_duration: str
    bounce_rate: float
    bounce_rate_change: float


class TopPage(BaseModel):
    path: str
    views: int
    avg_time: str


class GeoEntry(BaseModel):
    country: str
    users: int
