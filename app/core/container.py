"""Service wiring for one application instance.

``create_app`` builds a fresh :class:`Services` bundle and stores it on
``app.state`` so every app (and every test) starts from the seed data.
Routes reach it through the :func:`get_services` dependency.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from fastapi import Request

from app.adapters.simulation import NetworkSimulator, create_network_simulator
from app.core.config import Settings, settings as default_settings
from app.data.seed import (
    generate_users,
    seed_activities,
    seed_api_keys,
    seed_notifications,
    seed_system_settings,
    seed_users,
    utcnow,
)
from app.services.activity_log import ActivityLog
from app.services.analytics_service import AnalyticsService
from app.services.api_key_service import ApiKeyService
from app.services.auth_service import AuthService
from app.services.dashboard_service import DashboardService
from app.services.notification_service import NotificationService
from app.services.report_service import ReportService
from app.services.settings_service import SettingsService
from app.services.user_service import UserService


@dataclass
class Services:
    simulator: NetworkSimulator
    activity: ActivityLog
    notifications: NotificationService
    users: UserService
    system_settings: SettingsService
    api_keys: ApiKeyService
    auth: AuthService
    dashboard: DashboardService
    analytics: AnalyticsService
    reports: ReportService


def build_services(config: Settings | None = None) -> Services:
    """Create every service over freshly seeded in-memory stores."""
    cfg = config or default_settings
    rng = random.Random(cfg.app.seed)
    now = utcnow()

    simulator = create_network_simulator(cfg.mock, rng=rng)
    activity = ActivityLog(max_items=cfg.app.activity_log_size, seed=seed_activities(now))
    notifications = NotificationService(simulator, seed=seed_notifications(now))

    fixed = seed_users(now)
    generated = generate_users(cfg.app.generated_user_count, rng, now, start_id=len(fixed) + 1)
    users = UserService(simulator, activity, notifications, seed=fixed + generated)

    system_settings = SettingsService(simulator, notifications, seed_system_settings())
    api_keys = ApiKeyService(simulator, activity, notifications, seed=seed_api_keys(now))
    auth = AuthService(
        simulator,
        users,
        system_settings,
        activity,
        app_settings=cfg.app,
        login_failure_rate=cfg.mock.login_failure_rate,
    )

    return Services(
        simulator=simulator,
        activity=activity,
        notifications=notifications,
        users=users,
        system_settings=system_settings,
        api_keys=api_keys,
        auth=auth,
        dashboard=DashboardService(simulator, activity, rng=rng),
        analytics=AnalyticsService(simulator),
        reports=ReportService(
            simulator, activity, notifications, history_size=cfg.app.report_history_size
        ),
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the services of the running app."""
    return request.app.state.services
