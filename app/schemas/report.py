"""Pydantic schemas for report generation and export."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.schemas.dashboard import ChartDataPoint

ReportType = Literal["users", "revenue", "activity", "growth"]
DateRange = Literal["7d", "30d", "90d", "1y", "custom"]


class ReportTypeInfo(BaseModel):
    id: ReportType
    label: str


class DateRangeInfo(BaseModel):
    id: DateRange
    label: str


class ReportCatalog(BaseModel):
    types: list[ReportTypeInfo]
    date_ranges: list[DateRangeInfo]
    export_formats: list[str]


class ReportRequest(BaseModel):
    type: ReportType = "users"
    date_range: DateRange = "30d"
    start_date: date | None = Field(default=None, description="First day, inclusive. Required for a custom range.")
    end_date: date | None = Field(default=None, description="Last day, inclusive. Required for a custom range.")


class ReportRow(BaseModel):
    """A chart point plus its change against the previous row."""

    name: str
    value: float
    value2: float | None = None
    change_pct: float = Field(..., description="Percent change vs. the previous row (0 for the first).")


class Report(BaseModel):
    id: str
    type: ReportType
    title: str
    date_range: DateRange
    start_date: date
    end_date: date
    generated_at: datetime
    summary: dict[str, float | int | str]
    chart_data: list[ChartDataPoint]
    rows: list[ReportRow]


class ReportSummary(BaseModel):
    """History entry without the data payload."""

    id: str
    type: ReportType
    title: str
    date_range: DateRange
    generated_at: datetime
