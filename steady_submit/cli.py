"""
Command-line interface for steady-submit.

Provides a Click-based CLI that submits one transaction to the mock endpoint
and reports each state transition as it happens.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, Optional

import click

from steady_submit.config import Config, load_config
from steady_submit.controller import SubmissionController
from steady_submit.delay import format_duration
from steady_submit.endpoint import MockEndpoint
from steady_submit.errors import ConfigError
from steady_submit.state import SubmissionState, SubmissionStatus


def echo_status(message: str, level: str = "info") -> None:
    """Print a status message with appropriate styling."""
    prefix = {
        "info": click.style("[*]", fg="blue"),
        "success": click.style("[+]", fg="green"),
        "warning": click.style("[!]", fg="yellow"),
        "error": click.style("[-]", fg="red"),
        "wait": click.style("[~]", fg="cyan"),
    }.get(level, "[*]")
    click.echo(f"{prefix} {message}")


def configure_logging(config: Config) -> None:
    """Apply the configured log level and optional log file."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def render_state(state: SubmissionState) -> None:
    """Print one state transition."""
    if state.status == SubmissionStatus.PENDING:
        echo_status("Processing...", "info")
    elif state.status == SubmissionStatus.RETRYING:
        echo_status(
            f"Connection unstable. Retrying... (try {state.attempt_count})", "wait"
        )
    elif state.status == SubmissionStatus.SUCCESS:
        result_id = getattr(state.last_result, "id", None)
        suffix = f" ID: {result_id}" if result_id else ""
        echo_status(f"Transaction successful!{suffix}", "success")
    elif state.status == SubmissionStatus.ERROR:
        message = getattr(state.last_error, "message", None) or str(state.last_error)
        echo_status(message or "Transaction failed. Please try again.", "error")


def parse_fields(fields: tuple[str, ...]) -> dict[str, str]:
    """Parse KEY=VALUE pairs into a dict."""
    parsed = {}
    for item in fields:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint="--field")
        parsed[key] = value
    return parsed


async def submit_transaction(
    payload: dict[str, Any],
    config: Config,
    idempotency_key: Optional[str] = None,
) -> bool:
    """
    Submit one transaction through a SubmissionController.

    Args:
        payload: Transaction fields
        config: Configuration
        idempotency_key: Explicit token (generated when None)

    Returns:
        True if the transaction succeeded
    """
    endpoint = MockEndpoint.from_config(config)
    controller = SubmissionController.from_config(endpoint, config)
    controller.subscribe(render_state)

    try:
        await controller.submit(payload, idempotency_key=idempotency_key)
    except Exception:
        logging.getLogger(__name__).debug("Submission failed", exc_info=True)
        return False
    finally:
        echo_status(
            f"{endpoint.calls} call(s), "
            f"waited {format_duration(controller.delay.total_wait)} between retries",
            "info",
        )
    return True


@click.command()
@click.option("--email", "-e", required=True, help="Payer email address")
@click.option("--amount", "-a", required=True, type=float, help="Amount to pay")
@click.option(
    "--field",
    "-f",
    "fields",
    multiple=True,
    help="Extra payload field as KEY=VALUE (can be repeated)",
)
@click.option(
    "--max-retries",
    type=click.IntRange(min=0),
    help="Retries after the initial attempt (default: from config)",
)
@click.option(
    "--retry-delay",
    type=click.FloatRange(min=0),
    help="Seconds to wait before each retry (default: from config)",
)
@click.option("--key", "idempotency_key", help="Idempotency key (default: generated)")
@click.option("--seed", type=int, help="Seed for the mock endpoint")
@click.option(
    "--instant",
    is_flag=True,
    help="Mock endpoint answers without simulated latency",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True),
    help="Path to config file",
)
@click.version_option(package_name="steady-submit")
def main(
    email: str,
    amount: float,
    fields: tuple[str, ...],
    max_retries: Optional[int],
    retry_delay: Optional[float],
    idempotency_key: Optional[str],
    seed: Optional[int],
    instant: bool,
    config_path: Optional[str],
) -> None:
    """
    Submit a transaction, retrying transient failures.

    Talks to a mock payment endpoint that randomly succeeds, succeeds
    slowly, or fails with 503. Use error@example.com to force persistent
    failure and retry@example.com to force a recovery after two failures.

    \b
    Examples:
        steady-submit --email you@example.com --amount 25
        steady-submit -e retry@example.com -a 10 --retry-delay 2
        steady-submit -e you@example.com -a 5 --field note=rent --instant
    """
    # Load config
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.UsageError(str(e))

    # Apply CLI overrides
    if max_retries is not None:
        config.max_retries = max_retries
    if retry_delay is not None:
        config.retry_delay = retry_delay
    if seed is not None:
        config.seed = seed
    if instant:
        config = config.instant_mode()

    # Validate arguments
    if "@" not in email:
        raise click.BadParameter("must be an email address", param_hint="--email")
    if amount <= 0:
        raise click.BadParameter("must be greater than zero", param_hint="--amount")

    configure_logging(config)

    payload: dict[str, Any] = {**parse_fields(fields), "email": email, "amount": amount}
    success = asyncio.run(submit_transaction(payload, config, idempotency_key))
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
