"""
Configuration handling for steady-submit.

Loads configuration from YAML files with sensible defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from steady_submit.errors import ConfigError


@dataclass
class Config:
    """Configuration for steady-submit behavior."""

    # Retry settings
    max_retries: int = 3  # Retries after the initial attempt
    retry_delay: float = 0.75  # Fixed wait before each retry, in seconds

    # Mock endpoint settings
    latency_min: float = 5.0  # Slow-success latency range, in seconds
    latency_max: float = 10.0
    always_fail_email: str = "error@example.com"
    flaky_email: str = "retry@example.com"
    flaky_failures: int = 2  # 503s before the flaky email recovers
    seed: Optional[int] = None

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("max_retries", "flaky_failures"):
            _require_number(name, getattr(self, name), int)
        for name in ("retry_delay", "latency_min", "latency_max"):
            _require_number(name, getattr(self, name), (int, float))
        if self.seed is not None:
            _require_number("seed", self.seed, int)

        if self.max_retries < 0:
            raise ConfigError(f"max_retries must be non-negative, got {self.max_retries}")
        if self.retry_delay < 0:
            raise ConfigError(f"retry_delay must be non-negative, got {self.retry_delay}")
        if self.latency_min < 0 or self.latency_max < self.latency_min:
            raise ConfigError(
                f"invalid latency range [{self.latency_min}, {self.latency_max}]"
            )
        if self.flaky_failures < 0:
            raise ConfigError(
                f"flaky_failures must be non-negative, got {self.flaky_failures}"
            )

    def instant_mode(self) -> Config:
        """Return a copy whose mock endpoint answers without latency."""
        return Config(
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            latency_min=0.0,
            latency_max=0.0,
            always_fail_email=self.always_fail_email,
            flaky_email=self.flaky_email,
            flaky_failures=self.flaky_failures,
            seed=self.seed,
            log_level=self.log_level,
            log_file=self.log_file,
        )


def load_config(path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file.

    Searches for config in order:
    1. Explicit path argument
    2. ./steady-submit.yaml
    3. ~/.steady-submit.yaml
    4. ~/.config/steady-submit/config.yaml

    If no file found, returns default configuration.

    Args:
        path: Explicit path to config file

    Returns:
        Config object

    Raises:
        ConfigError: If the file holds invalid values
    """
    search_paths = []

    if path:
        search_paths.append(Path(path))
    else:
        search_paths.extend(
            [
                Path("steady-submit.yaml"),
                Path.home() / ".steady-submit.yaml",
                Path.home() / ".config" / "steady-submit" / "config.yaml",
            ]
        )

    for config_path in search_paths:
        if config_path.exists():
            return _load_yaml_config(config_path)

    return Config()


def _load_yaml_config(path: Path) -> Config:
    """Load config from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    # Flatten nested structure
    retry = _section(data, "retry", path)
    endpoint = _section(data, "endpoint", path)
    logging = _section(data, "logging", path)

    return Config(
        # Retry
        max_retries=retry.get("max_retries", 3),
        retry_delay=retry.get("delay_seconds", 0.75),
        # Endpoint
        latency_min=endpoint.get("latency_min_seconds", 5.0),
        latency_max=endpoint.get("latency_max_seconds", 10.0),
        always_fail_email=endpoint.get("always_fail_email", "error@example.com"),
        flaky_email=endpoint.get("flaky_email", "retry@example.com"),
        flaky_failures=endpoint.get("flaky_failures", 2),
        seed=endpoint.get("seed"),
        # Logging
        log_level=logging.get("level", "INFO"),
        log_file=logging.get("file"),
    )


def _section(data: dict, name: str, path: Path) -> dict:
    """Return a config section; an empty section (``retry:``) reads as {}."""
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"{path}: section '{name}' must be a mapping")
    return section


def _require_number(name: str, value: object, kinds: type | tuple[type, ...]) -> None:
    # bool is an int subclass but never a valid count or duration
    if isinstance(value, bool) or not isinstance(value, kinds):
        expected = "an integer" if kinds is int else "a number"
        raise ConfigError(f"{name} must be {expected}, got {value!r}")
