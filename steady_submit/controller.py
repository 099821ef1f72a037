"""
Submission controller for steady-submit.

Drives a single logical write to completion against an unreliable endpoint:
one initial attempt plus up to max_retries retries on transient failures,
with a fixed delay before each retry. At most one cycle runs at a time per
controller; overlapping submit() calls are dropped.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Optional

from steady_submit.classifier import Decision, classify
from steady_submit.delay import RetryDelay
from steady_submit.errors import ConfigError
from steady_submit.state import SubmissionState, SubmissionStatus

if TYPE_CHECKING:
    from steady_submit.config import Config
    from steady_submit.endpoint import SubmitOperation

logger = logging.getLogger(__name__)

Subscriber = Callable[[SubmissionState], None]


def new_idempotency_key() -> str:
    """Generate a fresh idempotency key for one logical submission."""
    return f"txn_{uuid.uuid4().hex}"


class SubmissionController:
    """
    Single-flight retry controller around a submit operation.

    The guard is a non-blocking lock: acquiring it admits a cycle, failing
    to acquire it means a cycle is already running. State snapshots are
    swapped under a separate reentrant lock and pushed to subscribers in
    order while it is held.
    """

    def __init__(
        self,
        operation: SubmitOperation,
        max_retries: int = 3,
        retry_delay: float = 0.75,
    ):
        """
        Initialize the controller.

        Args:
            operation: Awaitable submit operation (the remote endpoint)
            max_retries: Retries allowed after the initial attempt
            retry_delay: Fixed wait before each retry in seconds
        """
        if max_retries < 0:
            raise ConfigError(f"max_retries must be non-negative, got {max_retries}")

        self._operation = operation
        self._max_retries = max_retries
        self._delay = RetryDelay(retry_delay)

        self._guard = threading.Lock()
        self._state_lock = threading.RLock()
        self._state = SubmissionState()
        self._subscribers: list[Subscriber] = []

    @classmethod
    def from_config(
        cls, operation: SubmitOperation, config: Config
    ) -> SubmissionController:
        """Create a SubmissionController from configuration."""
        return cls(
            operation,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
        )

    @property
    def max_retries(self) -> int:
        return self._max_retries

    @property
    def retry_delay(self) -> float:
        return self._delay.delay

    @property
    def delay(self) -> RetryDelay:
        return self._delay

    @property
    def state(self) -> SubmissionState:
        """Latest published snapshot."""
        with self._state_lock:
            return self._state

    @property
    def in_flight(self) -> bool:
        return self._guard.locked()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback invoked with every published snapshot.

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def submit(
        self,
        payload: Mapping[str, Any],
        idempotency_key: Optional[str] = None,
    ) -> Any:
        """
        Run one attempt cycle for payload.

        Args:
            payload: Caller fields forwarded to the submit operation
            idempotency_key: Token shared by every attempt of this cycle.
                Falls back to payload["idempotency_key"], then to a new key.

        Returns:
            The operation's success value, or None if a cycle was already
            in flight and this call was dropped

        Raises:
            Exception: The terminal failure, after it is recorded in state
        """
        if not self._guard.acquire(blocking=False):
            logger.debug("Submission already in flight, dropping duplicate submit()")
            return None

        try:
            key = idempotency_key or payload.get("idempotency_key") or new_idempotency_key()
            self._delay.reset()
            self._publish(
                status=SubmissionStatus.PENDING,
                attempt_count=0,
                last_error=None,
                last_result=None,
                idempotency_key=key,
            )
            logger.info("Submission %s accepted", key)
            return await self._run({**payload, "idempotency_key": key})
        except BaseException as e:
            # Failures from the attempt loop are already recorded
            if self.state.in_flight:
                logger.warning("Submission interrupted while in flight: %r", e)
                self._publish(
                    status=SubmissionStatus.ERROR, last_error=e, last_result=None
                )
            raise
        finally:
            self._guard.release()

    async def _run(self, payload: Mapping[str, Any]) -> Any:
        for attempt in range(self._max_retries + 1):
            if attempt > 0:
                self._publish(status=SubmissionStatus.RETRYING, attempt_count=attempt)
                await self._delay.wait()

            try:
                result = await self._operation(payload)
            except Exception as e:
                decision, reason = classify(e, attempt, self._max_retries)
                if decision == Decision.RETRY:
                    logger.warning(
                        "%s (waiting %.3fs)", reason, self._delay.delay
                    )
                    continue
                logger.info("Submission failed: %s", reason)
                self._publish(
                    status=SubmissionStatus.ERROR, last_error=e, last_result=None
                )
                raise

            logger.info("Submission succeeded after %d attempt(s)", attempt + 1)
            self._publish(
                status=SubmissionStatus.SUCCESS, last_result=result, last_error=None
            )
            return result

    def reset(self) -> None:
        """Return to IDLE and clear transient fields; ignored while in flight."""
        # A submit() admitted meanwhile publishes PENDING after this IDLE
        with self._state_lock:
            if self._guard.locked():
                logger.debug("Submission in flight, ignoring reset()")
                return

            self._delay.reset()
            self._publish(
                status=SubmissionStatus.IDLE,
                attempt_count=0,
                last_error=None,
                last_result=None,
                idempotency_key=None,
            )

    def _publish(self, **changes: Any) -> None:
        # Subscribers see transitions in publish order
        with self._state_lock:
            self._state = dataclasses.replace(
                self._state, timestamp=datetime.now(), **changes
            )
            snapshot = self._state

            for callback in list(self._subscribers):
                try:
                    callback(snapshot)
                except Exception:
                    logger.exception("State subscriber %r failed", callback)
