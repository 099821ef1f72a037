"""
Submit operation contract and a mock remote endpoint.

The mock behaves like a flaky payment API: some requests succeed at once,
some succeed slowly, some fail with 503. Two magic email addresses force
deterministic behavior for demos and tests. All bookkeeping lives on the
endpoint instance, so every test can build its own.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Protocol

from steady_submit.errors import ServiceUnavailableError

if TYPE_CHECKING:
    from steady_submit.config import Config

logger = logging.getLogger(__name__)


class SubmitOperation(Protocol):
    """An awaitable write that settles exactly once per call."""

    async def __call__(self, payload: Mapping[str, Any]) -> Any: ...


@dataclass
class SubmitResult:
    """Success value returned by the endpoint."""

    success: bool
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> Optional[str]:
        return self.data.get("id")


class MockEndpoint:
    """
    Fake remote endpoint with non-deterministic latency and failures.

    Attributes:
        calls: Number of times submit() has been invoked
        processed: Results already produced, keyed by idempotency key.
            Never pruned; build a fresh endpoint per test or demo run.
    """

    def __init__(
        self,
        latency_min: float = 5.0,
        latency_max: float = 10.0,
        always_fail_email: str = "error@example.com",
        flaky_email: str = "retry@example.com",
        flaky_failures: int = 2,
        seed: Optional[int] = None,
    ):
        """
        Initialize the endpoint.

        Args:
            latency_min: Lower bound of the slow-success latency in seconds
            latency_max: Upper bound of the slow-success latency in seconds
            always_fail_email: Email that always fails with 503
            flaky_email: Email that fails flaky_failures times, then succeeds
            flaky_failures: Consecutive 503s before the flaky email recovers
            seed: Seed for the outcome generator (None for random)
        """
        self.latency_min = latency_min
        self.latency_max = latency_max
        self.always_fail_email = always_fail_email
        self.flaky_email = flaky_email
        self.flaky_failures = flaky_failures
        self.rng = random.Random(seed)

        self.calls = 0
        self.flaky_attempts = 0
        self.processed: dict[str, SubmitResult] = {}

    @classmethod
    def from_config(cls, config: Config) -> MockEndpoint:
        """Create a MockEndpoint from configuration."""
        return cls(
            latency_min=config.latency_min,
            latency_max=config.latency_max,
            always_fail_email=config.always_fail_email,
            flaky_email=config.flaky_email,
            flaky_failures=config.flaky_failures,
            seed=config.seed,
        )

    async def __call__(self, payload: Mapping[str, Any]) -> SubmitResult:
        return await self.submit(payload)

    async def submit(self, payload: Mapping[str, Any]) -> SubmitResult:
        """
        Process one submit request.

        Args:
            payload: Caller fields plus an optional idempotency_key

        Returns:
            SubmitResult carrying the payload and a generated id

        Raises:
            ServiceUnavailableError: On a simulated outage
        """
        self.calls += 1
        key = payload.get("idempotency_key")

        if key is not None and key in self.processed:
            logger.info("Replaying result for idempotency key %s", key)
            return self.processed[key]

        email = payload.get("email")

        if email == self.always_fail_email:
            logger.info("Forcing 503 error (always fail)")
            raise ServiceUnavailableError("Service Temporarily Unavailable (Forced)")

        if email == self.flaky_email:
            self.flaky_attempts += 1
            logger.info("Flaky endpoint attempt %d", self.flaky_attempts)
            if self.flaky_attempts <= self.flaky_failures:
                raise ServiceUnavailableError("Service is hiccuping (will recover)")
            self.flaky_attempts = 0
            return self._record(key, payload, f"mock-recovered-{_now_ms()}")

        outcome = self.rng.randint(0, 2)

        if outcome == 0:
            return self._record(key, payload, self._mock_id())

        if outcome == 1:
            await asyncio.sleep(self.rng.uniform(self.latency_min, self.latency_max))
            return self._record(key, payload, self._mock_id())

        raise ServiceUnavailableError()

    def _mock_id(self) -> str:
        return f"mock-{_now_ms()}-{self.rng.randint(1000, 9999)}"

    def _record(
        self, key: Optional[str], payload: Mapping[str, Any], result_id: str
    ) -> SubmitResult:
        result = SubmitResult(success=True, data={**payload, "id": result_id})
        if key is not None:
            self.processed[key] = result
        return result


def _now_ms() -> int:
    return int(time.time() * 1000)
