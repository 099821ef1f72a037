"""Failure values raised by submit operations and configuration."""

from __future__ import annotations

from typing import Optional


class SubmissionError(Exception):
    """
    A failed submit attempt.

    Attributes:
        message: Human-readable description from the endpoint
        status: Structured status classifier (HTTP-style), if any
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status!r}, message={self.message!r})"


class ServiceUnavailableError(SubmissionError):
    """The endpoint is temporarily unavailable (503)."""

    def __init__(self, message: str = "Service temporarily unavailable"):
        super().__init__(message, status=503)


class ValidationFailedError(SubmissionError):
    """The endpoint rejected the payload (422)."""

    def __init__(self, message: str = "Payload rejected"):
        super().__init__(message, status=422)


class ConfigError(ValueError):
    """Invalid configuration value."""
