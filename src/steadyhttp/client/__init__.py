"""HTTP client module for steadyhttp.

Provides :class:`ResilientClient`, an asynchronous client wrapping
:class:`httpx.AsyncClient` with per-attempt timeouts, retry with
exponential backoff, failure reporting, and an in-memory response cache,
plus the building blocks it composes.

Classes:
    :class:`ResilientClient` -- the public client.
    :class:`RequestExecutor` -- performs a single attempt.
    :class:`RetryController` -- decides whether and when to retry.

Example::

    from steadyhttp.client import ResilientClient
    from steadyhttp.models import ClientConfig

    async with ResilientClient(ClientConfig(base_url="https://api.example.com")) as client:
        resp = await client.get("/users")
"""

from steadyhttp.client.async_client import ResilientClient
from steadyhttp.client.executor import RequestExecutor
from steadyhttp.client.retry import RetryController

__all__ = ["ResilientClient", "RequestExecutor", "RetryController"]
