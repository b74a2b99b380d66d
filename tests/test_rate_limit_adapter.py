"""Unit tests for the in-memory sliding-window rate limiter."""

from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter


def test_allows_up_to_limit_in_window() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=3, window_seconds=60, clock=clock)

    assert limiter.consume("k").allowed is True
    assert limiter.consume("k").allowed is True
    result = limiter.consume("k")
    assert result.allowed is True
    assert result.remaining == 0
    assert result.retry_after_seconds is None


def test_blocks_when_over_limit() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=60, clock=clock)

    assert limiter.consume("k").allowed is True
    assert limiter.consume("k").allowed is True

    blocked = limiter.consume("k")
    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.retry_after_seconds == 60


def test_window_slides_instead_of_resetting() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=10, clock=clock)

    assert limiter.consume("k").allowed is True
    clock.return_value = 1005.0
    assert limiter.consume("k").allowed is True

    # Only the first hit has aged out at 1010; the one from 1005 still counts.
    clock.return_value = 1010.0
    result = limiter.consume("k")
    assert result.allowed is True
    assert result.remaining == 0

    clock.return_value = 1011.0
    assert limiter.consume("k").allowed is False


def test_hit_exactly_window_old_is_expired() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=10, clock=clock)

    assert limiter.consume("k").allowed is True
    clock.return_value = 1009.999
    assert limiter.consume("k").allowed is False

    clock.return_value = 1020.0
    assert limiter.consume("k").allowed is True


def test_rejected_requests_are_recorded() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=10, clock=clock)

    assert limiter.consume("k").allowed is True
    clock.return_value = 1008.0
    assert limiter.consume("k").allowed is False

    # The original hit left the window, but the rejected one at 1008 did not.
    clock.return_value = 1011.0
    blocked = limiter.consume("k")
    assert blocked.allowed is False
    # Hits at 1008 and 1011 both have to age out before one more fits.
    assert blocked.retry_after_seconds == 10

    clock.return_value = 1021.0
    assert limiter.consume("k").allowed is True


def test_retry_after_points_at_next_free_slot() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=60, clock=clock)

    limiter.consume("k")
    clock.return_value = 1030.0
    limiter.consume("k")
    clock.return_value = 1040.0
    blocked = limiter.consume("k")

    assert blocked.allowed is False
    # Hits at 1000, 1030 and 1040: the next request fits once 1030 expires.
    assert blocked.retry_after_seconds == 50
    assert blocked.reset_at == 1060


def test_isolated_by_key() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    assert limiter.consume("k1").allowed is True
    assert limiter.consume("k1").allowed is False

    assert limiter.consume("k2").allowed is True


def test_peek_does_not_record() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=3, window_seconds=60, clock=clock)

    fresh = limiter.peek("k")
    assert fresh.allowed is True
    assert fresh.remaining == 3
    assert fresh.reset_at == 1000

    limiter.consume("k")
    assert limiter.peek("k").remaining == 2
    assert limiter.peek("k").remaining == 2


def test_peek_reports_blocked_when_budget_spent() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    limiter.consume("k")
    status = limiter.peek("k")
    assert status.allowed is False
    assert status.remaining == 0


def test_reset_single_key_and_all() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    limiter.consume("a")
    limiter.consume("b")
    limiter.reset("a")
    assert limiter.consume("a").allowed is True
    assert limiter.consume("b").allowed is False

    limiter.reset()
    assert limiter.consume("b").allowed is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_seconds": 60},
        {"limit": 1, "window_seconds": 0},
        {"limit": 1, "window_seconds": -5},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemorySlidingWindowRateLimiter(**kwargs)


def test_empty_key_rejected() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60)

    with pytest.raises(ValueError):
        limiter.consume("")

    with pytest.raises(ValueError):
        limiter.peek("")
