"""Unit tests for login sessions, refresh tokens and login throttling."""

import asyncio
from unittest.mock import Mock

import pytest

from app.adapters.simulation import NetworkSimulator
from app.core.config import AppSettings
from app.core.errors import AuthenticationAppError, RateLimitAppError, ValidationAppError
from app.data.seed import seed_activities, seed_system_settings, seed_users, utcnow
from app.schemas.settings import SystemSettingsUpdate
from app.services.activity_log import ActivityLog
from app.services.auth_service import AuthService
from app.services.notification_service import NotificationService
from app.services.settings_service import SettingsService
from app.services.user_service import UserService


@pytest.fixture
def clock() -> Mock:
    return Mock(return_value=1_000_000.0)


@pytest.fixture
def simulator() -> NetworkSimulator:
    return NetworkSimulator(latency_enabled=False)


@pytest.fixture
def activity() -> ActivityLog:
    return ActivityLog(seed=seed_activities(utcnow()))


@pytest.fixture
def system_settings(simulator: NetworkSimulator) -> SettingsService:
    return SettingsService(simulator, NotificationService(simulator), seed_system_settings())


@pytest.fixture
def auth(simulator, activity, system_settings, clock) -> AuthService:
    users = UserService(simulator, activity, NotificationService(simulator), seed=seed_users(utcnow()))
    return AuthService(
        simulator,
        users,
        system_settings,
        activity,
        app_settings=AppSettings(demo_password="password", login_attempt_window_seconds=900),
        login_failure_rate=0.0,
        clock=clock,
    )


class TestLogin:
    @pytest.mark.asyncio
    async def test_success_issues_session(self, auth: AuthService, activity: ActivityLog, clock: Mock) -> None:
        session = await auth.login("Admin@Nexus.com", "password")

        assert session.user.email == "admin@nexus.com"
        assert session.token != session.refresh_token
        assert session.expires_at == int(clock.return_value) + 3600
        assert activity.recent(1)[0].type == "login"
        assert auth.resolve(session.token).id == "1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("email", "password"),
        [("", "password"), ("not-an-email", "password"), ("admin@nexus.com", ""), ("admin@nexus.com", "12345")],
    )
    async def test_malformed_input(self, auth: AuthService, email: str, password: str) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            await auth.login(email, password)
        assert exc_info.value.code == "invalid_login"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("email", "password"),
        [("admin@nexus.com", "wrong-password"), ("nobody@nexus.com", "password")],
    )
    async def test_bad_credentials(self, auth: AuthService, email: str, password: str) -> None:
        with pytest.raises(AuthenticationAppError) as exc_info:
            await auth.login(email, password)
        assert exc_info.value.code == "invalid_credentials"

    @pytest.mark.asyncio
    async def test_throttles_after_max_failed_attempts(self, auth: AuthService, clock: Mock) -> None:
        for _ in range(5):
            with pytest.raises(AuthenticationAppError):
                await auth.login("admin@nexus.com", "wrong-password")

        with pytest.raises(RateLimitAppError) as exc_info:
            await auth.login("admin@nexus.com", "password")
        assert exc_info.value.code == "too_many_login_attempts"
        assert exc_info.value.details["retry_after"] > 0

        clock.return_value += 901
        session = await auth.login("admin@nexus.com", "password")
        assert session.user.id == "1"

    @pytest.mark.asyncio
    async def test_success_clears_failed_attempts(self, auth: AuthService) -> None:
        for _ in range(4):
            with pytest.raises(AuthenticationAppError):
                await auth.login("admin@nexus.com", "wrong-password")
        await auth.login("admin@nexus.com", "password")

        for _ in range(4):
            with pytest.raises(AuthenticationAppError):
                await auth.login("admin@nexus.com", "wrong-password")

    @pytest.mark.asyncio
    async def test_throttle_follows_max_login_attempts(
        self, auth: AuthService, system_settings: SettingsService
    ) -> None:
        await system_settings.update(SystemSettingsUpdate(max_login_attempts=1))

        with pytest.raises(AuthenticationAppError):
            await auth.login("admin@nexus.com", "wrong-password")
        with pytest.raises(RateLimitAppError):
            await auth.login("admin@nexus.com", "password")

    @pytest.mark.asyncio
    async def test_concurrent_failures_never_exceed_max_attempts(self, auth: AuthService) -> None:
        results = await asyncio.gather(
            *(auth.login("admin@nexus.com", "wrong-password") for _ in range(8)),
            return_exceptions=True,
        )

        assert sum(isinstance(r, AuthenticationAppError) for r in results) == 5
        assert sum(isinstance(r, RateLimitAppError) for r in results) == 3
        assert auth.login_limiter().peek("login:admin@nexus.com").remaining == 0


class TestSessions:
    @pytest.mark.asyncio
    async def test_expired_token(self, auth: AuthService, clock: Mock) -> None:
        session = await auth.login("admin@nexus.com", "password")
        clock.return_value += 3600

        with pytest.raises(AuthenticationAppError) as exc_info:
            auth.resolve(session.token)
        assert exc_info.value.code == "token_expired"

        # The expired session is dropped, so a second attempt is just invalid.
        with pytest.raises(AuthenticationAppError) as exc_info:
            auth.resolve(session.token)
        assert exc_info.value.code == "token_invalid"

    @pytest.mark.parametrize(("token", "code"), [(None, "not_authenticated"), ("", "not_authenticated"), ("bogus", "token_invalid")])
    def test_resolve_rejects(self, auth: AuthService, token, code: str) -> None:
        with pytest.raises(AuthenticationAppError) as exc_info:
            auth.resolve(token)
        assert exc_info.value.code == code

    @pytest.mark.asyncio
    async def test_refresh_rotates_access_token(self, auth: AuthService, clock: Mock) -> None:
        session = await auth.login("admin@nexus.com", "password")
        clock.return_value += 3000

        refreshed = await auth.refresh(session.refresh_token)

        assert refreshed.token != session.token
        assert refreshed.refresh_token == session.refresh_token
        assert refreshed.expires_at == int(clock.return_value) + 3600
        assert auth.resolve(refreshed.token).id == "1"
        with pytest.raises(AuthenticationAppError):
            auth.resolve(session.token)

    @pytest.mark.asyncio
    async def test_refresh_token_lasts_a_week(self, auth: AuthService, clock: Mock) -> None:
        session = await auth.login("admin@nexus.com", "password")
        clock.return_value += 8 * 24 * 3600

        with pytest.raises(AuthenticationAppError) as exc_info:
            await auth.refresh(session.refresh_token)
        assert exc_info.value.code == "token_invalid"

    @pytest.mark.asyncio
    async def test_remember_me_refresh_token_lasts_thirty_days(self, auth: AuthService, clock: Mock) -> None:
        session = await auth.login("admin@nexus.com", "password", remember_me=True)
        clock.return_value += 29 * 24 * 3600

        refreshed = await auth.refresh(session.refresh_token)
        assert auth.resolve(refreshed.token).id == "1"

        clock.return_value += 2 * 24 * 3600
        with pytest.raises(AuthenticationAppError):
            await auth.refresh(session.refresh_token)

    @pytest.mark.asyncio
    async def test_refresh_unknown_token(self, auth: AuthService) -> None:
        with pytest.raises(AuthenticationAppError) as exc_info:
            await auth.refresh("nope")
        assert exc_info.value.code == "token_invalid"

    @pytest.mark.asyncio
    async def test_logout_revokes_session_and_refresh_token(self, auth: AuthService, activity: ActivityLog) -> None:
        session = await auth.login("admin@nexus.com", "password")

        await auth.logout(session.token)

        assert activity.recent(1)[0].type == "logout"
        with pytest.raises(AuthenticationAppError):
            auth.resolve(session.token)
        with pytest.raises(AuthenticationAppError):
            await auth.refresh(session.refresh_token)

    @pytest.mark.asyncio
    async def test_logout_unknown_token_is_noop(self, auth: AuthService) -> None:
        await auth.logout("unknown")
