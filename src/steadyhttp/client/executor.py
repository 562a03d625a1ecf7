"""Single-attempt request execution under a deadline.

:class:`RequestExecutor` performs exactly one network round trip for a
:class:`~steadyhttp.models.RequestSpec` and classifies the result as an
:data:`~steadyhttp.models.AttemptOutcome`.  It never raises for network or
HTTP failures (those become :class:`~steadyhttp.models.Failure` values) and
it never touches the cache or retry state.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

import httpx

from steadyhttp.exceptions import InvalidRequestError
from steadyhttp.models import (
    AttemptOutcome,
    Failure,
    FailureKind,
    HTTPMethod,
    RequestSpec,
    Success,
)
from steadyhttp.security import validate_url

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Content-Type": "application/json"}


class RequestExecutor:
    """Issues one HTTP attempt and reports how it went.

    Args:
        http_client: An open :class:`httpx.AsyncClient`.  The executor
            does not own it and never closes it.
        base_url: Prefix for relative request URLs.
        timeout: Deadline in seconds for the whole attempt (connect, send,
            and receive).
    """

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, timeout: float) -> None:
        self._client = http_client
        self._base_url = base_url
        self._timeout = timeout

    def resolve(self, spec: RequestSpec) -> str:
        """Resolve and validate the target URL of *spec*.

        Raises:
            InvalidRequestError: If the method is unsupported or the URL
                does not resolve to an absolute ``http(s)`` address.
        """
        if not isinstance(spec.method, HTTPMethod):
            raise InvalidRequestError(f"Unsupported HTTP method: {spec.method}")
        url = spec.resolve_url(self._base_url)
        if not validate_url(url):
            raise InvalidRequestError(
                f"Cannot resolve request URL '{spec.url}' (base URL: '{self._base_url}')"
            )
        return url

    async def attempt(self, spec: RequestSpec) -> AttemptOutcome:
        """Perform one attempt for *spec*.

        Returns:
            :class:`~steadyhttp.models.Success` for a 2xx response, or a
            :class:`~steadyhttp.models.Failure` classified as ``timeout``
            (deadline elapsed), ``network_error`` (no usable response:
            transport failure, redirect loop, undecodable body) or
            ``http_error`` (non-2xx status).

        Raises:
            InvalidRequestError: If the request cannot be issued at all.
        """
        url = self.resolve(spec)
        headers = httpx.Headers(DEFAULT_HEADERS)
        headers.update(spec.headers)
        content: Optional[str] = None
        if spec.body is not None:
            content = json.dumps(spec.body, default=str)

        logger.debug("%s %s", spec.method.value, url)
        try:
            # wait_for cancels the in-flight request when the deadline passes.
            response = await asyncio.wait_for(
                self._client.request(
                    spec.method.value, url, headers=headers, content=content,
                ),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return Failure(
                kind=FailureKind.TIMEOUT,
                message=f"Request timed out after {self._timeout}s",
            )
        except httpx.RequestError as exc:
            # Transport failures plus redirect loops and undecodable bodies.
            return Failure(kind=FailureKind.NETWORK_ERROR, message=str(exc) or type(exc).__name__)

        if not response.is_success:
            message = f"HTTP {response.status_code}"
            if response.reason_phrase:
                message = f"{message}: {response.reason_phrase}"
            return Failure(
                kind=FailureKind.HTTP_ERROR,
                message=message,
                status=response.status_code,
            )

        return Success(
            status=response.status_code,
            status_text=response.reason_phrase or "",
            headers=dict(response.headers),
            body=decode_body(response),
        )


def decode_body(response: httpx.Response) -> Any:
    """Decode *response* as JSON, falling back to text; ``None`` when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
