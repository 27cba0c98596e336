"""Error taxonomy for the load engine."""

__all__ = [
    "LoadTestError",
    "ResolutionError",
    "TransportError",
    "MalformedRequestError",
]


class LoadTestError(Exception):
    """Base class for load engine errors."""


class ResolutionError(LoadTestError):
    """No usable HTTP method could be determined for the target.

    Fatal: the run must not start.
    """


class TransportError(LoadTestError):
    """A request failed before any response arrived (DNS, connect, TLS, timeout)."""


class MalformedRequestError(LoadTestError):
    """A request could not be built (invalid method, URL or body)."""
