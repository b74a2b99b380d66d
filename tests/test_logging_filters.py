"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from app.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    set_request_id,
)


@pytest.fixture
def capture():
    """Logger wired to a JSON handler with redaction; yields (logger, stream)."""
    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    yield logger, stream
    logger.handlers.clear()


def test_sensitive_filter_redacts_api_keys(capture):
    """Ensure SensitiveDataFilter redacts API key fields."""
    logger, stream = capture

    logger.info(
        "test_event",
        extra={
            "api_key": "sk-secret-123",
            "x-api-key": "another-secret",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()

    assert "sk-secret-123" not in output
    assert "another-secret" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_credentials(capture):
    """Ensure passwords and session tokens never reach the log line."""
    logger, stream = capture

    logger.info(
        "auth_event",
        extra={
            "password": "hunter22",
            "token": "tok_abcdef",
            "refresh_token": "ref_123456",
            "user_id": "1",
        },
    )

    record = json.loads(stream.getvalue())

    assert record["password"] == "[REDACTED]"
    assert record["token"] == "[REDACTED]"
    assert record["refresh_token"] == "[REDACTED]"
    assert record["user_id"] == "1"


def test_sensitive_filter_allows_safe_fields(capture):
    """Verify safe fields pass through unmodified."""
    logger, stream = capture

    logger.info(
        "safe_event",
        extra={
            "request_id": "req-123",
            "route": "/v1/users",
            "status": 200,
            "duration_ms": 150.5,
            "key_hash": "0123456789abcdef",
        },
    )

    output = stream.getvalue()

    assert "req-123" in output
    assert "/v1/users" in output
    assert "0123456789abcdef" in output
    assert "[REDACTED]" not in output


def test_sensitive_filter_redacts_nested_dicts(capture):
    """Ensure nested sensitive fields are redacted."""
    logger, stream = capture

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "authorization": "Bearer tok_secret",
                "user-agent": "pytest",
            },
            "safe_data": {
                "count": 5,
                "type": "test",
            },
        },
    )

    output = stream.getvalue()

    assert "tok_secret" not in output
    assert "[REDACTED]" in output
    assert "pytest" in output


def test_request_id_from_context(capture):
    logger, stream = capture
    set_request_id("ctx-7")
    try:
        logger.info("with_context")
    finally:
        clear_request_id()

    assert json.loads(stream.getvalue())["request_id"] == "ctx-7"


def test_tokens_in_free_text_are_masked(capture):
    logger, stream = capture

    logger.info(
        "login with %s",
        "tok_AbCdEfGh12345678",
        extra={"note": "client sent sk_live_51Hzg2J2K8LmNpQpR7vW4x in the body"},
    )

    record = json.loads(stream.getvalue())

    assert "tok_AbCdEfGh12345678" not in record["message"]
    assert "sk_live_51Hzg2J2K8LmNpQpR7vW4x" not in record["note"]
    assert record["note"].startswith("client sent [REDACTED]")


def test_exception_is_included(capture):
    logger, stream = capture
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logger.exception("failed")

    record = json.loads(stream.getvalue())

    assert record["level"] == "error"
    assert "RuntimeError: boom" in record["exception"]
