"""Simulated network behaviour for the in-memory service layer.

Every service operation awaits :meth:`NetworkSimulator.simulate` before
touching its store, so the dashboard experiences realistic latency and the
occasional failed request without any real backend behind it.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable

from app.core.config import MockSettings, settings
from app.core.errors import ServiceUnavailableAppError

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class NetworkSimulator:
    """Injects artificial delay and randomized failures.

    Attributes:
        latency_enabled: Whether to sleep at all.
        latency_scale: Multiplier applied to each nominal delay.
        failure_rate: Default probability of a simulated failure.
    """

    def __init__(
        self,
        *,
        latency_enabled: bool = True,
        latency_scale: float = 1.0,
        failure_rate: float = 0.0,
        rng: random.Random | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if latency_scale < 0:
            raise ValueError("latency_scale must be >= 0")
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be between 0 and 1")

        self.latency_enabled = latency_enabled
        self.latency_scale = latency_scale
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()
        self._sleep = sleep

    def delay_seconds(self, delay_ms: int) -> float:
        """Effective delay for a nominal ``delay_ms`` after scaling."""
        if not self.latency_enabled:
            return 0.0
        return max(0, delay_ms) * self.latency_scale / 1000.0

    async def simulate(
        self,
        operation: str,
        *,
        delay_ms: int = 500,
        failure_rate: float | None = None,
    ) -> None:
        """Wait out the simulated latency, then maybe fail.

        Args:
            operation: Dotted operation name, used in logs and error details.
            delay_ms: Nominal latency of the operation in milliseconds.
            failure_rate: Override of the default failure probability.

        Raises:
            ServiceUnavailableAppError: When the dice say this call fails.
        """
        delay = self.delay_seconds(delay_ms)
        if delay > 0:
            await self._sleep(delay)

        probability = self.failure_rate if failure_rate is None else failure_rate
        if probability > 0 and self._rng.random() < probability:
            logger.warning(
                "simulation.failure_injected",
                extra={"operation": operation, "probability": probability},
            )
            raise ServiceUnavailableAppError(
                code="simulated_failure",
                message="The service is temporarily unavailable. Please retry.",
                details={"operation": operation},
            )


def create_network_simulator(
    mock_settings: MockSettings | None = None,
    *,
    rng: random.Random | None = None,
) -> NetworkSimulator:
    """Build a simulator from ``MOCK_*`` settings."""
    cfg = mock_settings or settings.mock
    return NetworkSimulator(
        latency_enabled=cfg.latency_enabled,
        latency_scale=cfg.latency_scale,
        failure_rate=cfg.failure_rate,
        rng=rng,
    )
