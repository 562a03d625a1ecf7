"""Asynchronous resilient HTTP client.

This module provides :class:`ResilientClient`, which composes the three
request-path components:

- :class:`~steadyhttp.client.executor.RequestExecutor` -- one attempt under
  a per-attempt deadline.
- :class:`~steadyhttp.client.retry.RetryController` -- exponential backoff
  decisions (``retry_delay * 2 ** attempt``).
- :class:`~steadyhttp.cache.ResponseCache` -- TTL cache for cacheable GET
  responses, swept by a background :class:`~steadyhttp.cache.CacheSweeper`.

Every failed attempt is reported to an
:class:`~steadyhttp.reporting.ErrorReporter` before the retry decision.
Every attempt is timed into a :class:`~steadyhttp.reporting.MetricsRecorder`.
When all attempts fail, the last failure is raised as a
:class:`~steadyhttp.exceptions.RequestFailedError` subclass.

The client must be used as an async context manager so that the underlying
:class:`httpx.AsyncClient` and the sweep task are opened and closed together.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional

import httpx

from steadyhttp.cache import CacheSweeper, ResponseCache
from steadyhttp.client.executor import RequestExecutor
from steadyhttp.client.retry import RetryController
from steadyhttp.exceptions import RequestFailedError
from steadyhttp.models import (
    ApiResponse,
    AttemptOutcome,
    ClientConfig,
    Failure,
    FailureReport,
    HTTPMethod,
    RequestSpec,
    Success,
)
from steadyhttp.reporting import (
    API_ERROR_TIME,
    API_RESPONSE_TIME,
    ErrorReporter,
    LoggingErrorReporter,
    MetricsRecorder,
)

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 5000.0
"""Attempts slower than this are logged at WARNING level."""


class ResilientClient:
    """HTTP client with retry, per-attempt timeout, and response caching.

    Args:
        config: Client settings.  Defaults to :class:`ClientConfig` defaults
            (30 s timeout, 3 retries, 1 s base delay).
        reporter: Receives a :class:`~steadyhttp.models.FailureReport` for
            every failed attempt.  Defaults to a
            :class:`~steadyhttp.reporting.LoggingErrorReporter`.
        transport: Optional :class:`httpx.AsyncBaseTransport` passed to the
            underlying :class:`httpx.AsyncClient` (e.g. a
            :class:`httpx.MockTransport` in tests).
        clock: Time source for cache TTLs, in seconds.
        sleep: Coroutine function used for backoff waits.
        metrics: Receives the duration of every attempt in milliseconds.
            Defaults to a fresh :class:`~steadyhttp.reporting.MetricsRecorder`.
        timer: Monotonic time source used to time attempts, in seconds.

    Example::

        async with ResilientClient(ClientConfig(base_url="https://api.example.com")) as client:
            response = await client.get("/users")
            print(response.data)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        reporter: Optional[ErrorReporter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        metrics: Optional[MetricsRecorder] = None,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._config = config or ClientConfig()
        self._reporter: ErrorReporter = reporter if reporter is not None else LoggingErrorReporter()
        self._transport = transport
        self._sleep = sleep
        self._metrics = metrics if metrics is not None else MetricsRecorder()
        self._timer = timer
        self._retry = RetryController(self._config.retries, self._config.retry_delay)
        self._cache = ResponseCache(clock=clock)
        self._sweeper = CacheSweeper(self._cache, self._config.cleanup_interval)
        self._client: Optional[httpx.AsyncClient] = None
        self._executor: Optional[RequestExecutor] = None

    @property
    def config(self) -> ClientConfig:
        """The (immutable) configuration of this client."""
        return self._config

    @property
    def cache(self) -> ResponseCache:
        """The response cache shared by all calls on this client."""
        return self._cache

    @property
    def reporter(self) -> ErrorReporter:
        """The failure reporter."""
        return self._reporter

    @property
    def metrics(self) -> MetricsRecorder:
        """Per-attempt timings recorded by this client."""
        return self._metrics

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> ResilientClient:
        self._client = httpx.AsyncClient(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        self._executor = RequestExecutor(
            self._client, self._config.base_url, self._config.timeout,
        )
        self._sweeper.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop the cache sweeper and close the HTTP transport."""
        await self._sweeper.stop()
        if self._client:
            await self._client.aclose()
            self._client = None
            self._executor = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def execute(self, spec: RequestSpec) -> ApiResponse:
        """Run *spec* through the cache and the retry loop.

        A cacheable GET with a live cache entry returns immediately without
        network traffic.  Otherwise up to ``retries + 1`` attempts are made,
        sequentially, waiting ``retry_delay * 2 ** i`` after failed attempt
        ``i``.

        Args:
            spec: The request to perform.

        Returns:
            The decoded :class:`~steadyhttp.models.ApiResponse`.

        Raises:
            InvalidRequestError: If the URL cannot be resolved.
            RequestTimeoutError: If the last attempt timed out.
            NetworkError: If the last attempt failed at the transport level.
            HTTPStatusError: If the last attempt got a non-2xx response.
        """
        assert self._executor is not None, "Client not initialised -- use as async context manager"

        url = self._executor.resolve(spec)
        key: Optional[str] = None
        if spec.cacheable and spec.method == HTTPMethod.GET:
            key = spec.cache_key(self._config.base_url)
            entry = self._cache.lookup(key)
            if entry is not None:
                logger.debug("Cache hit: %s %s", spec.method.value, url)
                return ApiResponse(
                    data=entry.value,
                    status=200,
                    status_text="OK (Cached)",
                    from_cache=True,
                )

        last_failure: Optional[Failure] = None
        attempts = 0
        for attempt in range(self._config.retries + 1):
            attempts = attempt + 1
            started = self._timer()
            outcome = await self._executor.attempt(spec)
            duration = self._timer() - started
            self._record_timing(outcome, duration, url)

            if isinstance(outcome, Success):
                if key is not None:
                    self._cache.store(key, outcome.body, spec.cache_ttl)
                return ApiResponse(
                    data=outcome.body,
                    status=outcome.status,
                    status_text=outcome.status_text,
                    headers=outcome.headers,
                )

            last_failure = outcome
            self._report_failure(outcome, attempt, url, duration)

            decision = self._retry.decide(outcome, attempt)
            if not decision.retry:
                break
            logger.debug(
                "%s, retrying in %ss (attempt %d/%d)",
                outcome.message, decision.delay, attempt + 1, self._config.retries,
            )
            await self._sleep(decision.delay)

        assert last_failure is not None
        raise RequestFailedError.from_failure(last_failure, attempts, url)

    async def get(
        self,
        url: str,
        use_cache: bool = True,
        headers: Optional[dict[str, str]] = None,
        cache_ttl: Optional[float] = None,
    ) -> ApiResponse:
        """Send a GET request, served from the cache when possible.

        Args:
            url: Absolute URL or path appended to ``base_url``.
            use_cache: Read from and populate the response cache.
            headers: Header overrides.
            cache_ttl: TTL for a freshly cached response; defaults to the
                client's ``cache_ttl``.
        """
        return await self.execute(RequestSpec(
            url=url,
            method=HTTPMethod.GET,
            headers=headers or {},
            cacheable=use_cache,
            cache_ttl=cache_ttl if cache_ttl is not None else self._config.cache_ttl,
        ))

    async def post(
        self,
        url: str,
        body: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> ApiResponse:
        """Send a POST request with an optional JSON body."""
        return await self.execute(RequestSpec(
            url=url, method=HTTPMethod.POST, body=body, headers=headers or {},
        ))

    async def put(
        self,
        url: str,
        body: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> ApiResponse:
        """Send a PUT request with an optional JSON body."""
        return await self.execute(RequestSpec(
            url=url, method=HTTPMethod.PUT, body=body, headers=headers or {},
        ))

    async def delete(
        self,
        url: str,
        headers: Optional[dict[str, str]] = None,
    ) -> ApiResponse:
        """Send a DELETE request."""
        return await self.execute(RequestSpec(
            url=url, method=HTTPMethod.DELETE, headers=headers or {},
        ))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _record_timing(self, outcome: AttemptOutcome, duration: float, url: str) -> None:
        elapsed_ms = max(duration, 0.0) * 1000
        name = API_RESPONSE_TIME if isinstance(outcome, Success) else API_ERROR_TIME
        self._metrics.record(name, elapsed_ms, "ms", url)
        if elapsed_ms > SLOW_REQUEST_MS:
            logger.warning("Slow API request: %s took %.2fms", url, elapsed_ms)

    def _report_failure(self, failure: Failure, attempt: int, url: str, duration: float = 0.0) -> None:
        """Hand *failure* to the reporter; reporter errors never reach the caller."""
        report = FailureReport(
            kind=failure.kind,
            message=failure.message,
            attempt_index=attempt,
            target_url=url,
            timestamp=time.time(),
            duration=max(duration, 0.0),
        )
        try:
            self._reporter.report(report)
        except Exception:
            logger.exception("Error reporter failed for %s", url)
