"""
Fixed retry delay for steady-submit.

Every retry waits the same configured interval; the first attempt never
waits.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from steady_submit.errors import ConfigError

if TYPE_CHECKING:
    from steady_submit.config import Config


class RetryDelay:
    """
    Suspends the attempt loop between retries.

    Attributes:
        delay: Wait before each retry in seconds
        waits: Number of waits since the last reset
        total_wait: Total time waited across all retries
    """

    def __init__(self, delay: float = 0.75):
        if delay < 0:
            raise ConfigError(f"retry delay must be non-negative, got {delay}")
        self.delay = delay

        self.waits = 0
        self.total_wait = 0.0

    @classmethod
    def from_config(cls, config: Config) -> RetryDelay:
        """Create a RetryDelay from configuration."""
        return cls(delay=config.retry_delay)

    async def wait(self) -> float:
        """
        Wait out the retry delay.

        Only task cancellation interrupts the wait; an interrupted wait is
        not counted.

        Returns:
            Wait time in seconds
        """
        await asyncio.sleep(self.delay)
        self.waits += 1
        self.total_wait += self.delay
        return self.delay

    def reset(self) -> None:
        """Reset the wait counter at the start of a new cycle."""
        self.waits = 0
        # total_wait is kept for statistics

    def __str__(self) -> str:
        return (
            f"RetryDelay(delay={format_duration(self.delay)}, "
            f"waits={self.waits}, "
            f"total={format_duration(self.total_wait)})"
        )


def format_duration(seconds: float) -> str:
    """Format seconds as human-readable duration."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"
