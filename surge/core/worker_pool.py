"""Fixed pool of workers draining the dispatch queue."""

import asyncio
import logging
import random
from collections.abc import Callable, Sequence
from contextlib import AbstractAsyncContextManager

from surge.core.scheduler import END_OF_STREAM, TokenQueue
from surge.ports.http import HttpPort, RequestExecutorPort
from surge.ports.settings import TargetSpec

__all__ = ["WorkerPool", "ClientFactory", "select_method"]

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], AbstractAsyncContextManager[RequestExecutorPort]]


def select_method(
    explicit_method: str,
    supported: Sequence[str],
    rng: random.Random | None = None,
) -> str:
    """Pick the method for one request.

    Args:
        explicit_method: Configured method, or "" when auto-detected.
        supported: Resolved supported method set.
        rng: Optional random source (module-level random by default).

    Returns:
        The explicit method if set, otherwise a uniform pick from supported.
    """
    if explicit_method:
        return explicit_method
    return (rng or random).choice(supported)


class WorkerPool:
    """Run ``workers`` concurrent consumers of the token queue.

    Each worker owns one client for its whole lifetime and exits once it
    takes the END_OF_STREAM sentinel. Every queue item, sentinel included,
    is acknowledged with task_done() so the scheduler can join the queue.
    """

    def __init__(
        self,
        *,
        workers: int,
        target: TargetSpec,
        supported_methods: Sequence[str],
        client_factory: ClientFactory,
    ) -> None:
        if workers <= 0:
            raise ValueError("workers must be positive")
        if not target.method and not supported_methods:
            raise ValueError("Supported method set is empty")

        self.workers = workers
        self.target = target
        self.supported_methods = tuple(supported_methods)
        self.client_factory = client_factory

    async def _work(self, worker_id: int, queue: TokenQueue) -> None:
        """Consume tokens until the stream is closed."""
        async with self.client_factory() as client:
            while True:
                token = await queue.get()
                try:
                    if token is END_OF_STREAM:
                        logger.debug(f"Worker {worker_id} observed end of stream")
                        return
                    method = select_method(self.target.method, self.supported_methods)
                    await client.execute(
                        HttpPort(url=token.url, method=method, body=self.target.body)
                    )
                except Exception as e:  # noqa: BLE001
                    logger.error(f"Unexpected error in worker {worker_id}: {e}", exc_info=True)
                finally:
                    queue.task_done()

    async def run(self, queue: TokenQueue) -> None:
        """Start all workers and wait until each one has returned.

        Args:
            queue: Token queue fed by the DispatchScheduler.

        Raises:
            Exception: The first worker failure (e.g. a client that cannot
                open); remaining workers are cancelled first.
        """
        tasks = [asyncio.create_task(self._work(i, queue)) for i in range(self.workers)]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
