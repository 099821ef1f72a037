"""
Observable submission state for steady-submit.

Snapshots are immutable; the controller publishes a fresh one on every
transition so readers never see a half-applied update.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class SubmissionStatus(Enum):
    """Lifecycle of one attempt cycle."""

    IDLE = "IDLE"
    PENDING = "PENDING"
    RETRYING = "RETRYING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


@dataclass(frozen=True)
class SubmissionState:
    """Snapshot of a controller's submission state at a point in time."""

    status: SubmissionStatus = SubmissionStatus.IDLE
    attempt_count: int = 0  # Retries issued so far, 0 on the first attempt
    last_error: Optional[BaseException] = None  # Only set in ERROR
    last_result: Any = None  # Only set in SUCCESS
    idempotency_key: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def in_flight(self) -> bool:
        """True while an attempt cycle is running."""
        return self.status in (SubmissionStatus.PENDING, SubmissionStatus.RETRYING)

    @property
    def is_terminal(self) -> bool:
        return self.status in (SubmissionStatus.SUCCESS, SubmissionStatus.ERROR)

    def __str__(self) -> str:
        parts = [self.status.value]
        if self.attempt_count:
            parts.append(f"retry {self.attempt_count}")
        if self.last_error is not None:
            parts.append(f"error: {self.last_error}")
        if self.last_result is not None:
            parts.append(f"result: {self.last_result}")
        return f"SubmissionState({', '.join(parts)})"
