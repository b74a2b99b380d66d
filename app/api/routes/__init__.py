from __future__ import annotations

from app.api.routes.analytics import router as analytics_router
from app.api.routes.auth import router as auth_router
from app.api.routes.dashboard import router as dashboard_router
from app.api.routes.health import router as health_router
from app.api.routes.navigation import router as navigation_router
from app.api.routes.notifications import router as notifications_router
from app.api.routes.reports import router as reports_router
from app.api.routes.settings import router as settings_router
from app.api.routes.users import router as users_router
from app.api.routes.web import router as web_router

__all__ = [
    "analytics_router",
    "auth_router",
    "dashboard_router",
    "health_router",
    "navigation_router",
    "notifications_router",
    "reports_router",
    "settings_router",
    "users_router",
    "web_router",
]
