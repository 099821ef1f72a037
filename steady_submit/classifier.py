"""
Failure classification for steady-submit.

Determines whether a failed attempt should be retried or surfaced to the
caller. Only a "service temporarily unavailable" status is transient; every
other failure shape is terminal regardless of remaining retry budget.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

SERVICE_UNAVAILABLE = 503


class Decision(Enum):
    """Possible outcomes of classifying a failed attempt."""

    RETRY = "retry"
    FAIL = "fail"


def error_status(error: Any) -> Any:
    """Extract the status classifier from an exception or mapping-shaped error."""
    if isinstance(error, Mapping):
        return error.get("status")
    return getattr(error, "status", None)


def is_retryable(error: Any) -> bool:
    """
    Check whether a failure is transient.

    Args:
        error: The failure raised by the submit operation

    Returns:
        True if the failure carries the 503 status classifier
    """
    if error is None:
        return False
    return error_status(error) == SERVICE_UNAVAILABLE


def classify(error: Any, attempt: int, max_retries: int) -> tuple[Decision, str]:
    """
    Decide whether to retry after a failed attempt.

    Args:
        error: The failure raised by the submit operation
        attempt: Zero-based index of the attempt that failed
        max_retries: Retry budget after the initial attempt

    Returns:
        Tuple of (Decision, reason_string)
    """
    if not is_retryable(error):
        return Decision.FAIL, f"Terminal failure: {error!r}"

    if attempt >= max_retries:
        return (
            Decision.FAIL,
            f"Retries exhausted after {attempt + 1} attempts ({max_retries} retries)",
        )

    return (
        Decision.RETRY,
        f"Service unavailable, retry {attempt + 1}/{max_retries}",
    )
