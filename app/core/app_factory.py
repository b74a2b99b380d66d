"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and
the in-memory services) so each call yields an independent app seeded from
scratch, which keeps tests isolated from one another.
"""

from __future__ import annotations

from fastapi import FastAPI

from app.api.routes import (
    analytics_router,
    auth_router,
    dashboard_router,
    health_router,
    navigation_router,
    notifications_router,
    reports_router,
    settings_router,
    users_router,
    web_router,
)
from app.core.config import Settings, settings as default_settings
from app.core.container import build_services
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import RateLimiterProvider

API_ROUTERS = (
    auth_router,
    users_router,
    dashboard_router,
    analytics_router,
    reports_router,
    settings_router,
    notifications_router,
    navigation_router,
)


def create_app(config: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        config: Settings to build the services from (defaults to the
            environment-loaded global settings).

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    cfg = config or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log, debug=cfg.app.debug)

    app = FastAPI(
        title="Nexus Admin",
        description=(
            "Admin dashboard backed by an in-memory mock service layer: "
            "authentication, overview metrics, user management with search, "
            "filters, sorting and pagination, analytics, reports with CSV/JSON "
            "export, system settings and API keys. Every call simulates network "
            "latency and can be configured to fail at random."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    app.state.config = cfg
    app.state.services = build_services(cfg)
    app.state.rate_limiter_provider = RateLimiterProvider()

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    for router in API_ROUTERS:
        app.include_router(router, prefix="/v1")
    app.include_router(health_router)
    app.include_router(web_router)

    # OpenAPI customizations (security schemes, tags, exemptions)
    apply_openapi_customizations(app)

    return app
