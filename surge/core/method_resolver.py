"""HTTP method auto-detection with probe fallback."""

import logging
from dataclasses import dataclass

from surge.core.errors import ResolutionError
from surge.ports.http import MethodProbePort

__all__ = [
    "MethodResolution",
    "FALLBACK_PROBE_ORDER",
    "PREFERRED_METHODS",
    "choose_best_method",
    "parse_allow_header",
    "resolve_method",
]

logger = logging.getLogger(__name__)

PREFERRED_METHODS = ("POST", "GET", "HEAD")
FALLBACK_PROBE_ORDER = ("HEAD", "GET", "POST")


@dataclass(slots=True, frozen=True)
class MethodResolution:
    """Result of method resolution.

    Attributes:
        chosen: Suggested method for the target.
        supported: Methods known to be accepted, in discovery order.
    """

    chosen: str
    supported: tuple[str, ...]


def parse_allow_header(value: str | None) -> tuple[str, ...]:
    """Split an ``Allow`` header value into trimmed method names.

    Args:
        value: Raw header value, e.g. ``"GET, POST, DELETE"``.

    Returns:
        Methods in listed order; empty entries are dropped.
    """
    if not value:
        return ()
    return tuple(m.strip() for m in value.split(",") if m.strip())


def choose_best_method(methods: tuple[str, ...] | list[str]) -> str:
    """Pick a method by preference POST > GET > HEAD > first listed.

    Args:
        methods: Non-empty method list.

    Returns:
        The preferred method.

    Raises:
        ValueError: If methods is empty.
    """
    for preferred in PREFERRED_METHODS:
        if preferred in methods:
            return preferred
    if not methods:
        raise ValueError("Cannot choose a method from an empty list")
    return methods[0]


async def resolve_method(
    url: str,
    explicit_method: str,
    probe: MethodProbePort,
) -> MethodResolution:
    """Determine which method(s) to send to the target.

    Resolution order:
    1. Explicit method, returned as-is without touching the network.
    2. OPTIONS ``Allow`` header, best method by preference.
    3. HEAD, GET, POST probes; first method that gets any response wins.

    Args:
        url: Target URL.
        explicit_method: Configured method, or "" to auto-detect.
        probe: Adapter that issues the probe requests.

    Returns:
        Chosen method and supported set.

    Raises:
        ResolutionError: If no probe got a response.
    """
    if explicit_method:
        return MethodResolution(chosen=explicit_method, supported=(explicit_method,))

    logger.info(f"Detecting supported HTTP methods for {url}...")
    allowed = parse_allow_header(await probe.allow_header(url))
    if allowed:
        logger.debug(f"OPTIONS advertised: {', '.join(allowed)}")
        return MethodResolution(chosen=choose_best_method(allowed), supported=tuple(allowed))

    for method in FALLBACK_PROBE_ORDER:
        if await probe.responds_to(url, method):
            logger.debug(f"Fallback probe succeeded with {method}")
            return MethodResolution(chosen=method, supported=(method,))

    raise ResolutionError(f"No supported HTTP method detected for {url}")
