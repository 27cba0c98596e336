"""Metrics port definition (interface and DTOs)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

__all__ = ["Outcome", "RequestResultDto", "RunSummaryDto", "MetricsPort"]


class Outcome(Enum):
    """Classification of one load request."""

    SUCCESS = "success"
    ERROR_STATUS = "error_status"
    UNREACHABLE = "unreachable"


@dataclass(slots=True, frozen=True)
class RequestResultDto:
    """Immutable snapshot of a single HTTP attempt.

    Attributes:
        url: Requested URL.
        method: HTTP method used.
        outcome: How the attempt ended.
        status_code: HTTP status code when a response arrived; None otherwise.
        label: Human-readable status label for reporting.
    """

    url: str
    method: str
    outcome: Outcome
    status_code: int | None = None
    label: str = "Unreachable"


@dataclass(slots=True, frozen=True)
class RunSummaryDto:
    """Final counters of a load test.

    Attributes:
        total: Requests that received any HTTP response.
        successful: Responses with status in [200, 400).
        unreachable: Requests that failed before any response.
    """

    total: int = 0
    successful: int = 0
    unreachable: int = 0

    def __str__(self) -> str:
        return (
            f"Total: {self.total} | Success: {self.successful} | "
            f"Unreachable: {self.unreachable}"
        )


class MetricsPort(Protocol):
    """Interface for recording request outcomes.

    Implementations must be async-safe and non-blocking.
    Workers call update() after each attempt; the run controller calls
    snapshot() once every worker has returned.
    """

    def update(self, result: RequestResultDto, /) -> None:
        """Record a finished HTTP attempt.

        Args:
            result: The attempt to record.
        """
        ...

    def snapshot(self) -> RunSummaryDto:
        """Return current counter values.

        Returns:
            Immutable summary.
        """
        ...
