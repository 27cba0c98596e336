"""Wire method resolution, dispatch and workers into one load test run."""

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from surge.core.errors import ResolutionError
from surge.core.method_resolver import resolve_method
from surge.core.scheduler import DispatchScheduler
from surge.core.worker_pool import WorkerPool
from surge.ports.http import MethodProbePort
from surge.ports.metrics import MetricsPort, RunSummaryDto
from surge.ports.settings import SettingsPort

__all__ = ["run_load_test"]

logger = logging.getLogger(__name__)


async def run_load_test(
    settings: SettingsPort,
    *,
    stop_fn: Callable[[], bool],
    client_factory: Callable[[], AbstractAsyncContextManager[Any]],
    metrics: MetricsPort,
) -> RunSummaryDto:
    """Run one load test to completion.

    Sequence:
    1. Resolve the method set, probing the target if needed.
    2. Refuse to start with an empty method set.
    3. Run the scheduler and the worker pool concurrently.
    4. Return the counters once every worker has returned.

    Args:
        settings: Target and load profile.
        stop_fn: External cancellation source; must already be installed.
        client_factory: Returns a fresh async-context client (executor and probe).
        metrics: Shared counters updated by the clients.

    Returns:
        Final counters.

    Raises:
        ResolutionError: If no method could be determined.
        Exception: A scheduler or pool failure, re-raised once the other
            side has been cancelled.
    """
    target = settings.target

    probe: MethodProbePort
    async with client_factory() as probe:
        resolution = await resolve_method(target.url, target.method, probe)

    if not resolution.supported:
        raise ResolutionError(f"No supported HTTP method for {target.url}")

    if not target.method:
        logger.info(f"Suggested method: {resolution.chosen}")
    logger.info(f"Supported: {', '.join(resolution.supported)}")

    scheduler = DispatchScheduler(
        target.url,
        workers=settings.workers,
        requests_per_sec=settings.requests_per_sec,
        duration_in_sec=settings.duration_in_sec,
    )
    pool = WorkerPool(
        workers=settings.workers,
        target=target,
        supported_methods=resolution.supported,
        client_factory=client_factory,
    )
    queue = scheduler.make_queue()

    logger.info(
        f"Load test on {target.url} | {settings.duration_in_sec}s | "
        f"{settings.workers} workers | {settings.requests_per_sec} RPS"
    )
    dispatch = asyncio.create_task(scheduler.run(queue, stop_fn))
    workers = asyncio.create_task(pool.run(queue))
    done, pending = await asyncio.wait({dispatch, workers}, return_when=asyncio.FIRST_EXCEPTION)

    # A failed side would leave the other blocked on the queue forever
    if pending:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
    for task in done:
        task.result()

    summary = metrics.snapshot()
    logger.info("Test completed")
    logger.info(str(summary))
    return summary
