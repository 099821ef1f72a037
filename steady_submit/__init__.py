"""
steady-submit: Client-side retry controller for unreliable write endpoints.

Drives a single logical submission to completion, retrying transient 503
failures with a fixed delay, while guaranteeing at most one submission is in
flight and exposing every state transition to observers.
"""

__version__ = "0.1.0"

from steady_submit.state import SubmissionState, SubmissionStatus
from steady_submit.classifier import Decision, classify, is_retryable
from steady_submit.delay import RetryDelay
from steady_submit.controller import SubmissionController, new_idempotency_key
from steady_submit.endpoint import MockEndpoint, SubmitOperation, SubmitResult
from steady_submit.errors import (
    ConfigError,
    ServiceUnavailableError,
    SubmissionError,
    ValidationFailedError,
)
from steady_submit.config import Config, load_config

__all__ = [
    "SubmissionState",
    "SubmissionStatus",
    "Decision",
    "classify",
    "is_retryable",
    "RetryDelay",
    "SubmissionController",
    "new_idempotency_key",
    "MockEndpoint",
    "SubmitOperation",
    "SubmitResult",
    "ConfigError",
    "ServiceUnavailableError",
    "SubmissionError",
    "ValidationFailedError",
    "Config",
    "load_config",
]
