"""Settings port definition (DTOs)."""

import re
from dataclasses import dataclass

__all__ = ["TargetSpec", "SettingsPort", "BODY_METHODS", "METHOD_TOKEN"]

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})

# RFC 9110 token: the characters allowed in an HTTP method name
METHOD_TOKEN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


@dataclass(slots=True, frozen=True)
class TargetSpec:
    """Immutable description of what to hit.

    Attributes:
        url: Target HTTP(S) endpoint.
        method: Explicit upper-case HTTP method, or "" to auto-detect.
        body: Request payload for POST/PUT/PATCH, or "".
    """

    url: str
    method: str = ""
    body: str = ""


@dataclass
class SettingsPort:
    """Runtime settings for a load test.

    Decouples core from concrete configuration sources, enabling
    easy testing and implementation swapping.

    Attributes:
        target: Endpoint, method and body to send.
        duration_in_sec: Wall-clock length of the run.
        workers: Number of concurrent workers.
        requests_per_sec: Dispatch ticks per second.
    """

    target: TargetSpec
    duration_in_sec: float
    workers: int
    requests_per_sec: int
