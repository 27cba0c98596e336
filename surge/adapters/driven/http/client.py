"""HTTP client adapter: request execution, method probes and metrics integration."""

import asyncio
import logging
from types import TracebackType

import aiohttp
from aiohttp import ClientTimeout

from surge.adapters.driven.http.headers import random_headers
from surge.adapters.driven.http.status_labels import label_for
from surge.core.errors import MalformedRequestError, TransportError
from surge.ports.http import HttpPort
from surge.ports.metrics import MetricsPort, Outcome, RequestResultDto
from surge.ports.settings import BODY_METHODS, METHOD_TOKEN

__all__ = ["HttpClient", "TRANSPORT_ERRORS"]

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 5
PROBE_TIMEOUT = 5
CONNECTIONS_PER_HOST = 10
FIRST_SUCCESS_HTTP_CODE = 200
FIRST_FAILING_HTTP_CODE = 400
DRAIN_CHUNK_SIZE = 64 * 1024
UNREACHABLE_LABEL = "Unreachable"

# Failures that happen before (or instead of) an HTTP response
TRANSPORT_ERRORS = (
    aiohttp.ClientError,  # Connection refused, DNS failed, TLS, payload, disconnects
    asyncio.TimeoutError,  # Per-request timeout
)


class HttpClient:
    """HTTP client owned by exactly one worker.

    Features:
    - Randomized identity headers on every request.
    - Fixed per-request timeout, independent of session defaults.
    - Outcome classification fed into a shared metrics collector.
    - OPTIONS/method probes for method resolution.
    - Context manager for proper resource cleanup.

    TLS certificate verification is disabled on purpose: targets are
    exercised regardless of certificate validity.
    """

    def __init__(
        self,
        metrics: MetricsPort | None = None,
        *,
        request_timeout: float = REQUEST_TIMEOUT,
        probe_timeout: float = PROBE_TIMEOUT,
    ) -> None:
        """Initialize HTTP client.

        Args:
            metrics: Optional metrics collector to track attempts.
            request_timeout: Total seconds allowed per load request.
            probe_timeout: Total seconds allowed per probe request.
        """
        self.metrics = metrics
        self.request_timeout = request_timeout
        self.probe_timeout = probe_timeout
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager (start session).

        Returns:
            Self for use in async with statement.
        """
        connector = aiohttp.TCPConnector(
            ssl=False,
            limit=CONNECTIONS_PER_HOST,
            limit_per_host=CONNECTIONS_PER_HOST,
        )
        self.session = aiohttp.ClientSession(connector=connector)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session).

        Args:
            exc_type: Exception type if raised in context.
            exc: Exception instance if raised in context.
            tb: Traceback if raised in context.
        """
        if self.session:
            await self.session.close()

    def _require_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")
        return self.session

    async def allow_header(self, url: str) -> str | None:
        """Send OPTIONS and return its ``Allow`` header.

        Args:
            url: URL to probe.

        Returns:
            Header value, or None when absent or the request failed.
        """
        session = self._require_session()
        try:
            async with session.options(
                url, timeout=ClientTimeout(total=self.probe_timeout)
            ) as resp:
                logger.debug(f"OPTIONS {url} returned status {resp.status}")
                return resp.headers.get("Allow")
        except TRANSPORT_ERRORS as e:
            logger.warning(f"OPTIONS probe failed for {url}: {e}")
            return None

    async def responds_to(self, url: str, method: str) -> bool:
        """Check whether the target answers ``method`` at all.

        Args:
            url: URL to probe.
            method: HTTP method to try.

        Returns:
            True on any HTTP response regardless of status, False otherwise.
        """
        session = self._require_session()
        try:
            async with session.request(
                method, url, timeout=ClientTimeout(total=self.probe_timeout)
            ) as resp:
                logger.debug(f"{method} probe for {url} returned status {resp.status}")
                return True
        except TRANSPORT_ERRORS as e:
            logger.debug(f"{method} probe failed for {url}: {e}")
            return False

    async def _drain(self, resp: aiohttp.ClientResponse) -> None:
        """Read and discard the body so the connection returns to the pool."""
        try:
            async for _ in resp.content.iter_chunked(DRAIN_CHUNK_SIZE):
                pass
        except TRANSPORT_ERRORS as e:
            logger.debug(f"Body drain interrupted for {resp.url}: {e}")

    async def _send(self, req: HttpPort) -> int:
        """Send one request and return its status code.

        Args:
            req: Request to send.

        Returns:
            HTTP status code.

        Raises:
            RuntimeError: If session not initialized.
            MalformedRequestError: If the request cannot be built.
            TransportError: If no response arrived.
        """
        session = self._require_session()
        if not METHOD_TOKEN.fullmatch(req.method):
            raise MalformedRequestError(f"Invalid HTTP method: {req.method!r}")

        headers = random_headers()
        data: bytes | None = None
        if req.method in BODY_METHODS:
            headers["Content-Type"] = "application/json"
            data = req.body.encode()

        try:
            async with session.request(
                req.method,
                req.url,
                headers=headers,
                data=data,
                timeout=ClientTimeout(total=self.request_timeout),
            ) as resp:
                await self._drain(resp)
                return resp.status
        except aiohttp.InvalidURL as e:
            raise MalformedRequestError(f"Invalid URL: {req.url}") from e
        except TRANSPORT_ERRORS as e:
            raise TransportError(f"{req.method} {req.url}: {e!r}") from e
        except ValueError as e:
            raise MalformedRequestError(f"Cannot build {req.method} {req.url}: {e}") from e

    async def execute(self, req: HttpPort) -> RequestResultDto:
        """Send a load request, classify it and record metrics.

        Per-request failures never propagate: they are recorded as
        unreachable and the worker moves on.

        Args:
            req: HTTP request object.

        Returns:
            Classified result.
        """
        try:
            status = await self._send(req)
        except (TransportError, MalformedRequestError) as e:
            logger.debug(f"Request unreachable: {e}")
            result = RequestResultDto(
                url=req.url,
                method=req.method,
                outcome=Outcome.UNREACHABLE,
                label=UNREACHABLE_LABEL,
            )
        else:
            is_success = FIRST_SUCCESS_HTTP_CODE <= status < FIRST_FAILING_HTTP_CODE
            result = RequestResultDto(
                url=req.url,
                method=req.method,
                outcome=Outcome.SUCCESS if is_success else Outcome.ERROR_STATUS,
                status_code=status,
                label=label_for(status),
            )

        logger.info(f"[{result.label}] {result.url}")
        if self.metrics:
            self.metrics.update(result)

        return result
