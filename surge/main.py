"""Application entrypoint."""

import asyncio
import logging

from surge.adapters.driven.config.settings import load_settings
from surge.adapters.driven.http.client import HttpClient
from surge.adapters.driven.logging.logging_config import configure_logs
from surge.adapters.driven.metrics.run_counters import RunCounters
from surge.adapters.driving.signals import make_stop_on_signal
from surge.core.errors import ResolutionError
from surge.core.run_controller import run_load_test
from surge.ports.settings import SettingsPort, TargetSpec

__all__ = ["main", "run"]

logger = logging.getLogger(__name__)


async def main() -> int:
    """Run one load test.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration.
    3. Install the SIGINT/SIGTERM cancellation hook.
    4. Resolve methods, generate load, wait for all workers.
    5. Log the final counters.

    Returns:
        Process exit code: 0 on a completed run, 1 otherwise.
    """
    configure_logs()
    logger.info("Starting load engine...")

    try:
        config = load_settings()
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check TARGET_URL, DURATION_IN_SECONDS, WORKERS, "
            "REQUESTS_PER_SECOND and the optional HTTP_METHOD/REQUEST_BODY settings.",
            exc,
        )
        return 1

    # Wrap config into port so core depends on interface (hexagonal)
    settings_port = SettingsPort(
        target=TargetSpec(
            url=config.target_url,
            method=config.http_method,
            body=config.request_body,
        ),
        duration_in_sec=config.duration_in_sec,
        workers=config.workers,
        requests_per_sec=config.requests_per_sec,
    )

    counters = RunCounters()
    stop_fn = make_stop_on_signal()

    try:
        await run_load_test(
            settings_port,
            stop_fn=stop_fn,
            client_factory=lambda: HttpClient(metrics=counters),
            metrics=counters,
        )
    except ResolutionError as e:
        logger.error(f"Method detection failed, aborting: {e}")
        return 1
    except Exception as e:
        logger.error(f"Unhandled exception in load test: {e}", exc_info=True)
        return 1

    return 0


def run() -> None:
    """Console script entrypoint."""
    raise SystemExit(asyncio.run(main()))


if __name__ == "__main__":
    run()
