"""Rate-limited dispatch of work tokens to the worker pool."""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from surge.ports.http import DispatchToken

__all__ = ["DispatchScheduler", "SchedulerState", "END_OF_STREAM", "TokenQueue", "get_now_time"]

logger = logging.getLogger(__name__)

# Sentinel placed once per worker behind the last token when the stream closes.
END_OF_STREAM = None

TokenQueue = asyncio.Queue[DispatchToken | None]


def get_now_time() -> float:
    """Get current monotonic time in seconds.

    Uses event loop's monotonic clock for accurate scheduling
    without wall-clock drift.

    Returns:
        Current time in seconds (monotonic).
    """
    return asyncio.get_running_loop().time()


class SchedulerState(Enum):
    """Lifecycle of a DispatchScheduler."""

    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class DispatchScheduler:
    """Emit dispatch tokens at a fixed rate for a bounded duration.

    Every tick offers ``workers`` tokens to a bounded queue. Offers never
    block: when the queue is full the token is dropped, so slow workers
    cannot stall the ticking loop.

    The stream is closed by enqueuing one END_OF_STREAM sentinel per worker
    behind any pending tokens, either when the deadline passes or when
    ``stop_fn()`` reports an external stop request.
    """

    def __init__(
        self,
        url: str,
        *,
        workers: int,
        requests_per_sec: int,
        duration_in_sec: float,
    ) -> None:
        """Initialize scheduler.

        Args:
            url: Target URL carried by every token.
            workers: Tokens offered per tick; also number of sentinels on close.
            requests_per_sec: Ticks per second.
            duration_in_sec: Wall-clock length of the dispatch phase.

        Raises:
            ValueError: If any numeric argument is not positive.
        """
        if workers <= 0 or requests_per_sec <= 0 or duration_in_sec <= 0:
            raise ValueError("workers, requests_per_sec and duration_in_sec must be positive")

        self.url = url
        self.workers = workers
        self.requests_per_sec = requests_per_sec
        self.duration_in_sec = duration_in_sec
        self.state = SchedulerState.IDLE
        self.emitted = 0
        self.dropped = 0

    @property
    def tick_interval(self) -> float:
        """Seconds between ticks."""
        return 1.0 / self.requests_per_sec

    @property
    def queue_capacity(self) -> int:
        """Bounded queue size: one second worth of tokens."""
        return self.requests_per_sec * self.workers

    def make_queue(self) -> TokenQueue:
        """Create the bounded token queue shared with the worker pool."""
        return asyncio.Queue(maxsize=self.queue_capacity)

    def _offer(self, queue: TokenQueue, tick_time: float) -> None:
        """Offer one tick worth of tokens without blocking."""
        for _ in range(self.workers):
            try:
                queue.put_nowait(DispatchToken(url=self.url, ideal_time_sec=tick_time))
            except asyncio.QueueFull:
                self.dropped += 1
            else:
                self.emitted += 1

    async def run(self, queue: TokenQueue, stop_fn: Callable[[], bool]) -> None:
        """Tick until deadline or stop request, then close and drain the stream.

        Args:
            queue: Queue consumed by the worker pool.
            stop_fn: Callable that returns True when the run must stop early.

        Raises:
            RuntimeError: If the scheduler already ran.

        Notes:
            - stop_fn() is polled once per tick, so an external stop is
              honoured within one tick interval.
            - A late tick delays every following tick instead of being made
              up, keeping the emitted rate at or below target.
        """
        if self.state is not SchedulerState.IDLE:
            raise RuntimeError(f"Scheduler cannot run from state {self.state.value}")

        self.state = SchedulerState.RUNNING
        interval = self.tick_interval
        next_tick = get_now_time()
        deadline = next_tick + self.duration_in_sec

        while not stop_fn():
            now = get_now_time()
            if now >= deadline:
                break

            self._offer(queue, next_tick)

            # Offers stay at least one interval apart even after a late wake-up
            next_tick = max(next_tick + interval, now + interval)
            sleep_duration = max(0.0, min(next_tick, deadline) - get_now_time())
            await asyncio.sleep(sleep_duration)
        else:
            logger.info("Stop requested, closing dispatch stream...")

        self.state = SchedulerState.DRAINING
        logger.debug(f"Dispatch finished: emitted={self.emitted}, dropped={self.dropped}")

        for _ in range(self.workers):
            await queue.put(END_OF_STREAM)
        await queue.join()

        self.state = SchedulerState.STOPPED
