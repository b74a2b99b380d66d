from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.core.container import Services, get_services
from app.core.rate_limit import enforce_rate_limit
from app.schemas.common import ApiResponse
from app.schemas.dashboard import ActivityItem, ChartDataPoint, DashboardStats

router = APIRouter(prefix="/dashboard", tags=["Dashboard"], dependencies=[Depends(enforce_rate_limit)])

ServicesDep = Annotated[Services, Depends(get_services)]


@router.get("/stats")
async def get_stats(services: ServicesDep) -> ApiResponse[DashboardStats]:
    """Headline counters; sessions and server load change on every call."""
    return ApiResponse[DashboardStats](data=await services.dashboard.stats())


@router.get("/user-growth")
async def get_user_growth(services: ServicesDep) -> ApiResponse[list[ChartDataPoint]]:
    return ApiResponse[list[ChartDataPoint]](data=await services.dashboard.user_growth())


@router.get("/traffic")
async def get_traffic_sources(services: ServicesDep) -> ApiResponse[list[ChartDataPoint]]:
    return ApiResponse[list[ChartDataPoint]](data=await services.dashboard.traffic_sources())


@router.get("/revenue")
async def get_revenue(services: ServicesDep) -> ApiResponse[list[ChartDataPoint]]:
    return ApiResponse[list[ChartDataPoint]](data=await services.dashboard.revenue())


@router.get("/activities")
async def get_activities(
    services: ServicesDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> ApiResponse[list[ActivityItem]]:
    return ApiResponse[list[ActivityItem]](data=await services.dashboard.activities(limit))
