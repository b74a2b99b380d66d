from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from app.core.auth import require_roles
from app.core.container import Services, get_services
from app.core.rate_limit import enforce_rate_limit
from app.schemas.analytics import AnalyticsOverview, GeoEntry, TopPage
from app.schemas.common import ApiResponse
from app.schemas.dashboard import ChartDataPoint
from app.services.navigation_service import ADMIN_AND_MODERATOR

router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"],
    dependencies=[Depends(require_roles(*ADMIN_AND_MODERATOR)), Depends(enforce_rate_limit)],
)

ServicesDep = Annotated[Services, Depends(get_services)]


@router.get("/overview")
async def get_overview(services: ServicesDep) -> ApiResponse[AnalyticsOverview]:
    return ApiResponse[AnalyticsOverview](data=await services.analytics.overview())


@router.get("/top-pages")
async def get_top_pages(services: ServicesDep) -> ApiResponse[list[TopPage]]:
    return ApiResponse[list[TopPage]](data=await services.analytics.top_pages())


@router.get("/geography")
async def get_geography(services: ServicesDep) -> ApiResponse[list[GeoEntry]]:
    return ApiResponse[list[GeoEntry]](data=await services.analytics.geography())


@router.get("/{series}")
async def get_series(series: str, services: ServicesDep) -> ApiResponse[list[ChartDataPoint]]:
    """Chart series: ``page-views``, ``bounce-rate``, ``devices`` or ``browsers``."""
    return ApiResponse[list[ChartDataPoint]](data=await services.analytics.series(series))
