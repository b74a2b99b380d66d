"""Login sessions for the dashboard.

There is no real identity provider: any seeded user can sign in with the
configured demo password. Access tokens live in a TTL store whose lifetime
is the ``session_timeout`` system setting; refresh tokens outlive them and
can mint a new access token until they expire or the user logs out.

Failed logins are throttled per email with the same sliding-window limiter
that guards the API.
"""

from __future__ import annotations

import hmac
import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.adapters.simulation import NetworkSimulator
from app.core.config import AppSettings, settings
from app.core.errors import AuthenticationAppError, RateLimitAppError, ValidationAppError
from app.schemas.auth import AuthSession
from app.schemas.user import User
from app.services.activity_log import ActivityLog
from app.services.settings_service import SettingsService
from app.services.user_service import UserService
from app.utils.ttl_store import TTLStore
from app.utils.validators import email_error, password_error

logger = logging.getLogger(__name__)

REFRESH_TTL_SECONDS = 7 * 24 * 3600
REMEMBER_ME_REFRESH_TTL_SECONDS = 30 * 24 * 3600


@dataclass(frozen=True)
class SessionRecord:
    user_id: str
    refresh_token: str


@dataclass(frozen=True)
class RefreshRecord:
    user_id: str
    access_token: str


def _new_token(prefix: str) -> str:
    return f"{prefix}_{secrets.token_urlsafe(32)}"


class AuthService:
    """Issues, refreshes, resolves and revokes dashboard sessions."""

    def __init__(
        self,
        simulator: NetworkSimulator,
        users: UserService,
        system_settings: SettingsService,
        activity: ActivityLog,
        *,
        app_settings: AppSettings | None = None,
        login_failure_rate: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._simulator = simulator
        self._users = users
        self._settings = system_settings
        self._activity = activity
        self._app_settings = app_settings or settings.app
        self._login_failure_rate = (
            settings.mock.login_failure_rate if login_failure_rate is None else login_failure_rate
        )
        self._clock = clock
        self._sessions: TTLStore[SessionRecord] = TTLStore(clock=clock, name="sessions")
        self._refresh_tokens: TTLStore[RefreshRecord] = TTLStore(
            default_ttl_seconds=REFRESH_TTL_SECONDS, clock=clock, name="refresh_tokens"
        )
        self._login_limiter: InMemorySlidingWindowRateLimiter | None = None
        self._login_limiter_config: tuple[int, int] | None = None
        self._throttle_lock = threading.Lock()

    def login_limiter(self) -> InMemorySlidingWindowRateLimiter:
        """Failed-login limiter, rebuilt when ``max_login_attempts`` changes."""
        config = (
            self._settings.current.max_login_attempts,
            self._app_settings.login_attempt_window_seconds,
        )
        with self._throttle_lock:
            if self._login_limiter is None or self._login_limiter_config != config:
                self._login_limiter = InMemorySlidingWindowRateLimiter(
                    limit=config[0], window_seconds=config[1], clock=self._clock
                )
                self._login_limiter_config = config
            return self._login_limiter

    def _issue_access_token(self, user_id: str, refresh_token: str) -> tuple[str, int]:
        token = _new_token("tok")
        expires_at = self._sessions.set(
            token,
            SessionRecord(user_id=user_id, refresh_token=refresh_token),
            ttl_seconds=self._settings.current.session_timeout,
        )
        return token, int(expires_at)

    async def login(self, email: str, password: str, *, remember_me: bool = False) -> AuthSession:
        """Check credentials and open a session.

        Raises:
            ValidationAppError: Malformed email or too-short password.
            RateLimitAppError: Too many failed attempts for this email.
            AuthenticationAppError: Unknown email or wrong password.
            ServiceUnavailableAppError: Simulated backend failure.
        """
        errors = {
            name: problem
            for name, problem in (("email", email_error(email)), ("password", password_error(password)))
            if problem
        }
        if errors:
            raise ValidationAppError(
                code="invalid_login",
                message="; ".join(errors.values()),
                details={"fields": errors},
            )

        throttle_key = f"login:{email.strip().casefold()}"
        limiter = self.login_limiter()
        # Every attempt is counted up front; a successful login clears the count.
        blocked = limiter.consume(throttle_key)
        if not blocked.allowed:
            logger.warning("auth.login_throttled", extra={"limit": blocked.limit})
            raise RateLimitAppError(
                code="too_many_login_attempts",
                message="Too many failed login attempts. Please try again later.",
                details={
                    "limit": blocked.limit,
                    "remaining": 0,
                    "reset_at": blocked.reset_at,
                    "retry_after": blocked.retry_after_seconds or 0,
                },
            )

        await self._simulator.simulate("auth.login", delay_ms=800, failure_rate=self._login_failure_rate)

        user = self._users.find_by_email(email)
        password_ok = hmac.compare_digest(password.encode(), self._app_settings.demo_password.encode())
        if user is None or not password_ok:
            logger.warning("auth.login_failed", extra={"reason": "invalid_credentials"})
            raise AuthenticationAppError(
                code="invalid_credentials",
                message="Invalid email or password",
            )

        limiter.reset(throttle_key)
        refresh_token = _new_token("ref")
        token, expires_at = self._issue_access_token(user.id, refresh_token)
        self._refresh_tokens.set(
            refresh_token,
            RefreshRecord(user_id=user.id, access_token=token),
            ttl_seconds=REMEMBER_ME_REFRESH_TTL_SECONDS if remember_me else None,
        )

        user = self._users.touch_last_active(user.id) or user
        logger.info("auth.login_succeeded", extra={"user_id": user.id, "role": user.role})
        self._activity.record("login", "User logged in successfully", user_id=user.id, user_name=user.name)
        return AuthSession(user=user, token=token, refresh_token=refresh_token, expires_at=expires_at)

    async def logout(self, token: str) -> None:
        """Drop the session and its refresh token; unknown tokens are ignored."""
        await self._simulator.simulate("auth.logout", delay_ms=300)
        record = self._sessions.pop(token)
        if record is None:
            return
        self._refresh_tokens.pop(record.refresh_token)
        user = self._users.find_by_id(record.user_id)
        logger.info("auth.logged_out", extra={"user_id": record.user_id})
        self._activity.record(
            "logout",
            "User logged out",
            user_id=record.user_id,
            user_name=user.name if user else None,
        )

    async def refresh(self, refresh_token: str) -> AuthSession:
        """Mint a new access token; the refresh token stays the same."""
        await self._simulator.simulate("auth.refresh", delay_ms=500)
        item = self._refresh_tokens.get_item(refresh_token)
        user = self._users.find_by_id(item.value.user_id) if item else None
        if item is None or user is None:
            logger.warning("auth.refresh_failed", extra={"reason": "token_invalid"})
            raise AuthenticationAppError(code="token_invalid", message="Invalid refresh token")

        self._sessions.pop(item.value.access_token)
        token, expires_at = self._issue_access_token(user.id, refresh_token)
        self._refresh_tokens.set(
            refresh_token,
            RefreshRecord(user_id=user.id, access_token=token),
            ttl_seconds=item.expires_at - self._clock(),
        )
        logger.info("auth.refreshed", extra={"user_id": user.id})
        return AuthSession(user=user, token=token, refresh_token=refresh_token, expires_at=expires_at)

    def resolve(self, token: str | None) -> User:
        """Return the user behind an access token, without simulated latency.

        Raises:
            AuthenticationAppError: ``not_authenticated``, ``token_expired``
                or ``token_invalid``.
        """
        if not token:
            raise AuthenticationAppError(code="not_authenticated", message="Not authenticated")

        if self._sessions.is_expired(token):
            self._sessions.pop(token)
            logger.info("auth.session_expired")
            raise AuthenticationAppError(code="token_expired", message="Session expired")

        record = self._sessions.get(token)
        user = self._users.find_by_id(record.user_id) if record else None
        if record is None or user is None:
            if record is not None:
                self._sessions.pop(token)
            raise AuthenticationAppError(code="token_invalid", message="Invalid token")
        return user

    async def current_user(self, token: str | None) -> User:
        await self._simulator.simulate("auth.me", delay_ms=400)
        return self.resolve(token)
