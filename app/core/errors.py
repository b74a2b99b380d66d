"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    field: str
    fields: dict[str, str]
    resource: str
    resource_id: str
    operation: str
    limit: int
    remaining: int
    reset_at: int
    retry_after: int
    allowed: list[str]
    deleted: list[str]
    not_found: list[str]
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class AuthenticationAppError(AppError):
    """Raised when the caller is not authenticated (missing, bad or expired session)."""


class AuthorizationAppError(AppError):
    """Raised when an authenticated caller lacks the role or permission required."""


class NotFoundAppError(AppError):
    """Raised when a requested resource does not exist."""


class ConflictAppError(AppError):
    """Raised when a write collides with existing data (e.g. duplicate email)."""


class RateLimitAppError(AppError):
    """Raised when a caller exceeds its request budget."""


class ServiceUnavailableAppError(AppError):
    """Raised when the simulated backend injects a failure."""
