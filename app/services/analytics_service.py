"""Analytics page data: overview counters and per-dimension series."""

from __future__ import annotations

from app.adapters.simulation import NetworkSimulator
from app.core.errors import NotFoundAppError
from app.data import seed
from app.schemas.analytics import AnalyticsOverview, GeoEntry, TopPage
from app.schemas.dashboard import ChartDataPoint

SERIES: dict[str, list[ChartDataPoint]] = {
    "page-views": seed.PAGE_VIEWS,
    "bounce-rate": seed.BOUNCE_RATE,
    "devices": seed.DEVICES,
    "browsers": seed.BROWSERS,
}


class AnalyticsService:
    def __init__(self, simulator: NetworkSimulator) -> None:
        self._simulator = simulator

    async def overview(self) -> AnalyticsOverview:
        await self._simulator.simulate("analytics.overview", delay_ms=500)
        return seed.ANALYTICS_OVERVIEW

    async def series(self, name: str) -> list[ChartDataPoint]:
        """One of the chart series in :data:`SERIES`."""
        await self._simulator.simulate("analytics.series", delay_ms=500)
        try:
            return list(SERIES[name])
        except KeyError:
            raise NotFoundAppError(
                code="analytics_series_not_found",
                message=f"Unknown analytics series '{name}'",
                details={"resource": "analytics_series", "resource_id": name, "allowed": sorted(SERIES)},
            ) from None

    async def top_pages(self) -> list[TopPage]:
        await self._simulator.simulate("analytics.top_pages", delay_ms=500)
        return list(seed.TOP_PAGES)

    async def geography(self) -> list[GeoEntry]:
        await self._simulator.simulate("analytics.geography", delay_ms=500)
        return list(seed.GEOGRAPHY)
