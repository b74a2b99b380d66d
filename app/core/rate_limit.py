"""Rate limiting dependency for FastAPI routes.

This module wires the sliding-window limiter into the HTTP layer.

- Authenticated routes are limited per principal (``user:<id>`` or
  ``api_key:<id>``); public routes fall back to the client IP.
- Limit and window come from the runtime system settings
  (``rate_limit_requests`` / ``rate_limit_window``); the limiter is rebuilt
  when either number changes, which starts every key from a clean budget.
- Can be switched off entirely with ``APP_RATE_LIMIT_ENABLED=false``.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from typing import Annotated

from fastapi import Depends, Request, Response

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.core.auth import Principal, authenticate
from app.core.config import Settings, settings
from app.core.container import Services, get_services
from app.core.errors import RateLimitAppError

logger = logging.getLogger(__name__)


class RateLimiterProvider:
    """Holds the app's limiter and rebuilds it when its configuration changes."""

    def __init__(self) -> None:
        self._limiter: AbstractRateLimiter | None = None
        self._config: tuple[int, int] | None = None
        self._lock = threading.Lock()

    def get(self, limit: int, window_seconds: int) -> AbstractRateLimiter:
        config = (limit, window_seconds)
        with self._lock:
            if self._limiter is None or self._config != config:
                if self._limiter is not None:
                    logger.info(
                        "rate_limit.reconfigured",
                        extra={"limit": limit, "window_s": window_seconds},
                    )
                self._limiter = InMemorySlidingWindowRateLimiter(
                    limit=limit,
                    window_seconds=window_seconds,
                )
                self._config = config
            return self._limiter


def app_config(request: Request) -> Settings:
    """Settings the running app was built with; the process-wide ones otherwise."""
    return getattr(request.app.state, "config", settings)


def get_rate_limiter(request: Request, services: Services) -> AbstractRateLimiter:
    """Return the limiter for the running app, sized from the system settings."""
    provider: RateLimiterProvider = request.app.state.rate_limiter_provider
    current = services.system_settings.current
    return provider.get(current.rate_limit_requests, current.rate_limit_window)


def client_key(request: Request) -> str:
    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key for logging without exposing identifiers."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def _apply_headers(request: Request, response: Response, result: RateLimitResult) -> None:
    if not app_config(request).app.rate_limit_include_headers:
        return
    response.headers["X-RateLimit-Limit"] = str(result.limit)
    response.headers["X-RateLimit-Remaining"] = str(result.remaining)
    response.headers["X-RateLimit-Reset"] = str(result.reset_at)


def _consume(request: Request, response: Response, services: Services, key: str) -> None:
    limiter = get_rate_limiter(request, services)
    key_type = key.split(":", 1)[0]
    key_hash = _hash_limiter_key(key)

    result = limiter.consume(key)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "key_type": key_type,
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
                "window_s": limiter.window_seconds,
            },
        )
        _apply_headers(request, response, result)
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_type": key_type,
            "key_hash": key_hash,
            "limit": result.limit,
            "remaining": result.remaining,
            "window_s": limiter.window_seconds,
            "retry_after_s": retry_after,
        },
    )
    raise RateLimitAppError(
        code="rate_limit_exceeded",
        message="Rate limit exceeded. Try again later.",
        details={
            "limit": result.limit,
            "remaining": result.remaining,
            "reset_at": result.reset_at,
            "retry_after": retry_after,
        },
    )


async def enforce_rate_limit(
    request: Request,
    response: Response,
    principal: Annotated[Principal, Depends(authenticate)],
    services: Annotated[Services, Depends(get_services)],
) -> None:
    """FastAPI dependency limiting authenticated callers.

    Raises:
        RateLimitAppError: 429 when the caller's window is full.
    """
    if not app_config(request).app.rate_limit_enabled:
        return
    _consume(request, response, services, principal.rate_limit_key)


async def enforce_client_rate_limit(
    request: Request,
    response: Response,
    services: Annotated[Services, Depends(get_services)],
) -> None:
    """Same as :func:`enforce_rate_limit` for unauthenticated routes, keyed by IP."""
    if not app_config(request).app.rate_limit_enabled:
        return
    _consume(request, response, services, client_key(request))
