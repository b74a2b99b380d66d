"""Overview page: headline stats, chart series and recent activity."""

from __future__ import annotations

import logging
import random

from app.adapters.simulation import NetworkSimulator
from app.data.seed import TRAFFIC_SOURCES, USER_GROWTH, WEEKLY_REVENUE, seed_dashboard_stats
from app.schemas.dashboard import ActivityItem, ChartDataPoint, DashboardStats, ServerLoadStatus
from app.services.activity_log import ActivityLog

logger = logging.getLogger(__name__)

ACTIVE_SESSIONS_RANGE = (1100, 1399)
SERVER_LOAD_RANGE = (35, 64)
WARNING_LOAD = 70
CRITICAL_LOAD = 90


def server_load_status(load: int) -> ServerLoadStatus:
    if load >= CRITICAL_LOAD:
        return "critical"
    if load >= WARNING_LOAD:
        return "warning"
    return "stable"


class DashboardService:
    def __init__(
        self,
        simulator: NetworkSimulator,
        activity: ActivityLog,
        rng: random.Random | None = None,
    ) -> None:
        self._simulator = simulator
        self._activity = activity
        self._rng = rng or random.Random()
        self._baseline = seed_dashboard_stats()

    async def stats(self) -> DashboardStats:
        """Baseline numbers with live-looking jitter on sessions and server load."""
        await self._simulator.simulate("dashboard.stats", delay_ms=500)
        load = self._rng.randint(*SERVER_LOAD_RANGE)
        return self._baseline.model_copy(
            update={
                "active_sessions": self._rng.randint(*ACTIVE_SESSIONS_RANGE),
                "server_load": load,
                "server_load_status": server_load_status(load),
            }
        )

    async def user_growth(self) -> list[ChartDataPoint]:
        await self._simulator.simulate("dashboard.user_growth", delay_ms=600)
        return list(USER_GROWTH)

    async def traffic_sources(self) -> list[ChartDataPoint]:
        await self._simulator.simulate("dashboard.traffic_sources", delay_ms=500)
        return list(TRAFFIC_SOURCES)

    async def revenue(self) -> list[ChartDataPoint]:
        await self._simulator.simulate("dashboard.revenue", delay_ms=500)
        return list(WEEKLY_REVENUE)

    async def activities(self, limit: int = 10) -> list[ActivityItem]:
        await self._simulator.simulate("dashboard.activities", delay_ms=400)
        return self._activity.recent(limit)
