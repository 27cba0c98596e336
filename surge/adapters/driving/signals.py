"""Signal handling for cooperative cancellation."""

import asyncio
import logging
import signal
from collections.abc import Callable

__all__ = ["make_stop_on_signal"]

logger = logging.getLogger(__name__)


def make_stop_on_signal() -> Callable[[], bool]:
    """Create a SIGINT/SIGTERM-based stop flag for the dispatch scheduler.

    Registers handlers that set an asyncio.Event, returning an
    is_set-style callable for the scheduler to poll. Must be called
    before the scheduler starts so that no interrupt is missed.

    In-flight requests are never aborted: the scheduler stops ticking
    and workers finish what they already took.

    Returns:
        Callable that returns True once a termination signal was received.
    """
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    def handle_signal() -> None:
        """Signal handler that sets the stop event on SIGTERM/SIGINT."""
        if not stop.is_set():
            logger.info("Interrupt received, shutting down...")
        stop.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, handle_signal)

    return stop.is_set
