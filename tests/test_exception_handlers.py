"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import (
    AppError,
    AuthenticationAppError,
    AuthorizationAppError,
    ConflictAppError,
    NotFoundAppError,
    RateLimitAppError,
    ServiceUnavailableAppError,
    ValidationAppError,
)
from app.core.exception_handlers import setup_exception_handlers, status_for_error


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    """Create test client with handlers enabled."""
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    @pytest.mark.parametrize(
        "error_type, status_code",
        [
            (ValidationAppError, 400),
            (AuthenticationAppError, 401),
            (AuthorizationAppError, 403),
            (NotFoundAppError, 404),
            (ConflictAppError, 409),
            (RateLimitAppError, 429),
            (ServiceUnavailableAppError, 503),
            (AppError, 400),
        ],
    )
    def test_status_mapping(self, error_type: type[AppError], status_code: int):
        """Verify each domain error maps to its HTTP status."""
        assert status_for_error(error_type(code="x", message="y")) == status_code

    def test_validation_error_includes_details(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify ValidationAppError includes details when provided."""
        @app_with_handlers.get("/test-validation-details")
        async def test_endpoint():
            raise ValidationAppError(
                code="invalid_user",
                message="Invalid email format",
                details={"fields": {"email": "Invalid email format"}},
            )

        response = client.get("/test-validation-details")

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"]["code"] == "invalid_user"
        assert data["error"]["details"]["fields"] == {"email": "Invalid email format"}
        assert "request_id" in data["error"]

    def test_authentication_error_returns_401_with_challenge(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify AuthenticationAppError returns 401 and a Bearer challenge."""
        @app_with_handlers.get("/test-auth")
        async def test_endpoint():
            raise AuthenticationAppError(code="token_expired", message="Session expired")

        response = client.get("/test-auth")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"]["code"] == "token_expired"

    def test_authorization_error_returns_403(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify AuthorizationAppError returns HTTP 403 without a challenge."""
        @app_with_handlers.get("/test-forbidden")
        async def test_endpoint():
            raise AuthorizationAppError(code="insufficient_role", message="Not allowed")

        response = client.get("/test-forbidden")

        assert response.status_code == 403
        assert "WWW-Authenticate" not in response.headers

    def test_rate_limit_error_sets_headers(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify 429 responses carry Retry-After and X-RateLimit-* headers."""
        @app_with_handlers.get("/test-limited")
        async def test_endpoint():
            raise RateLimitAppError(
                code="rate_limit_exceeded",
                message="Rate limit exceeded",
                details={"limit": 100, "remaining": 0, "reset_at": 1700000000, "retry_after": 42},
            )

        response = client.get("/test-limited")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "42"
        assert response.headers["X-RateLimit-Limit"] == "100"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.headers["X-RateLimit-Reset"] == "1700000000"

    def test_simulated_failure_returns_503(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify injected backend failures surface as 503."""
        @app_with_handlers.get("/test-unavailable")
        async def test_endpoint():
            raise ServiceUnavailableAppError(
                code="simulated_failure",
                message="Network error. Please try again.",
                details={"operation": "users.list"},
            )

        response = client.get("/test-unavailable")

        assert response.status_code == 503
        assert response.json()["error"]["details"] == {"operation": "users.list"}

    def test_error_response_format_is_consistent(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify error responses have consistent JSON structure."""
        @app_with_handlers.get("/test-format")
        async def test_endpoint():
            raise NotFoundAppError(code="test", message="test")

        response = client.get("/test-format")
        data = response.json()

        # Required fields always present
        assert data["success"] is False
        assert "code" in data["error"]
        assert "message" in data["error"]
        assert "request_id" in data["error"]
        assert "details" not in data["error"]


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_returns_500(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify an unhandled error becomes a generic 500."""
        @app_with_handlers.get("/test-crash")
        async def test_endpoint():
            raise RuntimeError("database connection failed")

        response = client.get("/test-crash")

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert data["error"]["code"] == "internal_server_error"
        assert "database connection" not in response.text

    def test_general_exception_handler_never_leaks_stack_trace(self):
        """Verify stack traces are never included in response."""
        from app.core.exception_handlers import general_exception_handler

        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = ValueError("Test error with details")
        response = asyncio.run(general_exception_handler(request, exc))

        response_body = response.body if isinstance(response.body, bytes) else bytes(response.body)
        response_text = response_body.decode()
        # No traceback indicators
        assert "Traceback" not in response_text
        assert "File \"" not in response_text
        assert "ValueError" not in response_text
        assert json.loads(response_text)["error"]["code"] == "internal_server_error"


class TestErrorHandlerIntegration:
    """Integration tests for exception handler setup."""

    def test_setup_exception_handlers_registers_handlers(self, app_with_handlers: FastAPI):
        """Verify setup_exception_handlers properly registers handlers."""
        assert AppError in app_with_handlers.exception_handlers
        assert Exception in app_with_handlers.exception_handlers

    def test_multiple_handler_setups_does_not_fail(self):
        """Verify calling setup_exception_handlers multiple times is safe."""
        app = FastAPI()

        setup_exception_handlers(app)
        setup_exception_handlers(app)

        assert AppError in app.exception_handlers
