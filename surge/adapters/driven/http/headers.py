"""Randomized request identity headers."""

import random

__all__ = ["USER_AGENTS", "random_forwarded_for", "random_headers"]

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/117.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_5) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.6 Safari/605.1.15",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_6 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.6 Mobile/15E148 Safari/604.1",
    "Mozilla/5.0 (Linux; Android 13; Pixel 7 Pro) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/117.0.0.0 Mobile Safari/537.36",
    "Mozilla/5.0 (Linux; Android 13; SM-G991B) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/117.0.0.0 Mobile Safari/537.36",
)


def random_forwarded_for(rng: random.Random | None = None) -> str:
    """Return a random dotted-quad address, each octet in [0, 255)."""
    r = rng or random
    return ".".join(str(r.randrange(255)) for _ in range(4))


def random_headers(rng: random.Random | None = None) -> dict[str, str]:
    """Build a fresh set of identity headers for one request.

    Args:
        rng: Optional random source; module-level random by default.

    Returns:
        Mapping with User-Agent, Accept, Connection and X-Forwarded-For.
    """
    r = rng or random
    return {
        "User-Agent": r.choice(USER_AGENTS),
        "Accept": "*/*",
        "Connection": "keep-alive",
        "X-Forwarded-For": random_forwarded_for(r),
    }
