from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from app.core.auth import require_roles
from app.core.container import Services, get_services
from app.core.rate_limit import enforce_rate_limit
from app.schemas.common import ApiResponse
from app.schemas.report import Report, ReportCatalog, ReportRequest, ReportSummary
from app.services.navigation_service import ADMIN_ONLY

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    dependencies=[Depends(require_roles(*ADMIN_ONLY)), Depends(enforce_rate_limit)],
)

ServicesDep = Annotated[Services, Depends(get_services)]


@router.get("/types")
async def get_report_types(services: ServicesDep) -> ApiResponse[ReportCatalog]:
    return ApiResponse[ReportCatalog](data=services.reports.catalog())


@router.post("", status_code=status.HTTP_201_CREATED)
async def generate_report(body: ReportRequest, services: ServicesDep) -> ApiResponse[Report]:
    """Generate a report and keep it in the history for later export.

    A ``custom`` date range needs ``start_date <= end_date``.
    """
    report = await services.reports.generate(body)
    return ApiResponse[Report](data=report, message=f"{report.title} generated successfully")


@router.get("")
async def list_reports(services: ServicesDep) -> ApiResponse[list[ReportSummary]]:
    return ApiResponse[list[ReportSummary]](data=await services.reports.history())


@router.get("/{report_id}")
async def get_report(report_id: str, services: ServicesDep) -> ApiResponse[Report]:
    return ApiResponse[Report](data=await services.reports.get(report_id))


@router.get("/{report_id}/export")
async def export_report(
    report_id: str,
    services: ServicesDep,
    export_format: Annotated[str, Query(alias="format")] = "csv",
) -> Response:
    """Download a stored report as ``csv`` or ``json``."""
    exported = await services.reports.export(report_id, export_format)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
