"""HTTP port definitions (DTOs and interfaces)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from surge.ports.metrics import RequestResultDto

__all__ = ["DispatchToken", "HttpPort", "RequestExecutorPort", "MethodProbePort"]


@dataclass(slots=True, frozen=True)
class DispatchToken:
    """Permission for one worker to send one request now.

    Attributes:
        url: Target HTTP endpoint URL.
        ideal_time_sec: Monotonic time of the tick that emitted the token.
    """

    url: str
    ideal_time_sec: float


@dataclass(slots=True, frozen=True)
class HttpPort:
    """HTTP request to be sent by a worker.

    Decouples core scheduling logic from HTTP implementation details.

    Attributes:
        url: Target HTTP endpoint URL.
        method: HTTP method to use.
        body: Raw payload, only sent for methods that carry one.
    """

    url: str
    method: str
    body: str = ""


class RequestExecutorPort(Protocol):
    """Interface for sending one load request and classifying the result."""

    async def execute(self, req: HttpPort, /) -> RequestResultDto:
        """Send the request; never raises for per-request failures.

        Args:
            req: Request to send.

        Returns:
            Classified result of the attempt.
        """
        ...


class MethodProbePort(Protocol):
    """Interface used by method resolution to talk to the target."""

    async def allow_header(self, url: str, /) -> str | None:
        """Return the raw ``Allow`` header of an OPTIONS response, if any."""
        ...

    async def responds_to(self, url: str, method: str, /) -> bool:
        """Return True if the target answered ``method`` with any status."""
        ...
