"""Shared outcome counters for one load test run."""

from __future__ import annotations

from surge.ports.metrics import MetricsPort, Outcome, RequestResultDto, RunSummaryDto

__all__ = ["RunCounters"]


class RunCounters(MetricsPort):
    """Increment-only counters shared by every worker.

    Tracks:
    - Total requests that received a response.
    - Successful responses (2xx/3xx).
    - Unreachable requests (no response; not part of total).

    Updates happen without awaiting, so on a single event loop each
    update() is atomic with respect to other tasks. Not thread-safe;
    create one instance per event loop.
    """

    def __init__(self) -> None:
        self._total = 0
        self._successful = 0
        self._unreachable = 0

    @property
    def total(self) -> int:
        return self._total

    @property
    def successful(self) -> int:
        return self._successful

    @property
    def unreachable(self) -> int:
        return self._unreachable

    def update(self, result: RequestResultDto) -> None:
        """Record a finished HTTP attempt.

        Args:
            result: Classified attempt.
        """
        if result.outcome is Outcome.UNREACHABLE:
            self._unreachable += 1
            return

        self._total += 1
        if result.outcome is Outcome.SUCCESS:
            self._successful += 1

    def snapshot(self) -> RunSummaryDto:
        """Return current counter values."""
        return RunSummaryDto(
            total=self._total,
            successful=self._successful,
            unreachable=self._unreachable,
        )

    def __str__(self) -> str:
        """Return human-readable one-line summary for logging."""
        return str(self.snapshot())
