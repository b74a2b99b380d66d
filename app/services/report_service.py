"""Report generation, history and export.

A report snapshots the mock series for its type over a resolved date range,
adds period-over-period change per row, and stays in a bounded history so
it can be fetched or exported later.
"""

from __future__ import annotations

import csv
import io
import logging
import threading
import uuid
from collections import deque
from dataclasses import dataclass
from datetime import date, timedelta

from app.adapters.simulation import NetworkSimulator
from app.core.errors import NotFoundAppError, ValidationAppError
from app.data.seed import REPORT_DATA, utcnow
from app.schemas.dashboard import ChartDataPoint
from app.schemas.report import (
    DateRangeInfo,
    Report,
    ReportCatalog,
    ReportRequest,
    ReportRow,
    ReportSummary,
    ReportTypeInfo,
)
from app.services.activity_log import ActivityLog
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "json")

RANGE_DAYS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}

CATALOG = ReportCatalog(
    types=[
        ReportTypeInfo(id="users", label="User Report"),
        ReportTypeInfo(id="revenue", label="Revenue Report"),
        ReportTypeInfo(id="activity", label="Activity Report"),
        ReportTypeInfo(id="growth", label="Growth Report"),
    ],
    date_ranges=[
        DateRangeInfo(id="7d", label="Last 7 days"),
        DateRangeInfo(id="30d", label="Last 30 days"),
        DateRangeInfo(id="90d", label="Last 90 days"),
        DateRangeInfo(id="1y", label="Last year"),
        DateRangeInfo(id="custom", label="Custom range"),
    ],
    export_formats=list(EXPORT_FORMATS),
)


@dataclass(frozen=True)
class ExportedReport:
    content: str
    media_type: str
    filename: str


def resolve_period(request: ReportRequest, today: date) -> tuple[date, date]:
    """Turn a date-range choice into inclusive start and end dates."""
    if request.date_range != "custom":
        return today - timedelta(days=RANGE_DAYS[request.date_range] - 1), today

    if request.start_date is None or request.end_date is None:
        raise ValidationAppError(
            code="invalid_date_range",
            message="A custom range needs both a start and an end date",
            details={"fields": {"start_date": "required", "end_date": "required"}},
        )
    if request.start_date > request.end_date:
        raise ValidationAppError(
            code="invalid_date_range",
            message="Start date must be on or before end date",
            details={"field": "start_date"},
        )
    return request.start_date, request.end_date


def change_percent(current: float, previous: float | None) -> float:
    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, 2)


def build_rows(points: list[ChartDataPoint]) -> list[ReportRow]:
    rows = []
    previous: float | None = None
    for point in points:
        rows.append(
            ReportRow(
                name=point.name,
                value=point.value,
                value2=point.value2,
                change_pct=change_percent(point.value, previous),
            )
        )
        previous = point.value
    return rows


def to_csv(report: Report) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["name", "value", "value2", "change_pct"])
    for row in report.rows:
        writer.writerow([row.name, row.value, "" if row.value2 is None else row.value2, row.change_pct])
    return buffer.getvalue()


class ReportService:
    def __init__(
        self,
        simulator: NetworkSimulator,
        activity: ActivityLog,
        notifications: NotificationService,
        history_size: int = 50,
    ) -> None:
        self._simulator = simulator
        self._activity = activity
        self._notifications = notifications
        self._history: deque[Report] = deque(maxlen=history_size)
        self._lock = threading.Lock()

    def catalog(self) -> ReportCatalog:
        return CATALOG

    async def generate(self, request: ReportRequest) -> Report:
        now = utcnow()
        start, end = resolve_period(request, now.date())
        await self._simulator.simulate("reports.generate", delay_ms=1500)

        data = REPORT_DATA[request.type]
        points = [p.model_copy() for p in data["chart_data"]]
        report = Report(
            id=uuid.uuid4().hex[:12],
            type=request.type,
            title=data["title"],
            date_range=request.date_range,
            start_date=start,
            end_date=end,
            generated_at=now,
            summary=dict(data["summary"]),
            chart_data=points,
            rows=build_rows(points),
        )
        with self._lock:
            self._history.append(report)

        logger.info(
            "reports.generated",
            extra={"report_id": report.id, "report_type": report.type, "date_range": report.date_range},
        )
        self._activity.record("api_call", f"{report.title} generated")
        self._notifications.success(f"{report.title} generated successfully")
        return report

    async def history(self) -> list[ReportSummary]:
        await self._simulator.simulate("reports.history", delay_ms=300)
        with self._lock:
            reports = list(self._history)
        reports.reverse()
        return [ReportSummary(**r.model_dump(include=set(ReportSummary.model_fields))) for r in reports]

    def _find(self, report_id: str) -> Report:
        with self._lock:
            for report in self._history:
                if report.id == report_id:
                    return report
        raise NotFoundAppError(
            code="report_not_found",
            message="Report not found",
            details={"resource": "report", "resource_id": report_id},
        )

    async def get(self, report_id: str) -> Report:
        await self._simulator.simulate("reports.get", delay_ms=300)
        return self._find(report_id)

    async def export(self, report_id: str, fmt: str) -> ExportedReport:
        """Render a stored report as CSV or JSON.

        Raises:
            ValidationAppError: ``unsupported_export_format`` for anything else.
            NotFoundAppError: Unknown report id.
        """
        fmt = (fmt or "").lower()
        if fmt not in EXPORT_FORMATS:
            raise ValidationAppError(
                code="unsupported_export_format",
                message=f"Unsupported export format '{fmt}'",
                details={"field": "format", "allowed": list(EXPORT_FORMATS)},
            )
        report = self._find(report_id)
        await self._simulator.simulate("reports.export", delay_ms=500)

        filename = f"{report.type}-report-{report.end_date.isoformat()}.{fmt}"
        if fmt == "csv":
            exported = ExportedReport(to_csv(report), "text/csv", filename)
        else:
            exported = ExportedReport(report.model_dump_json(indent=2), "application/json", filename)
        logger.info("reports.exported", extra={"report_id": report.id, "export_format": fmt})
        return exported
