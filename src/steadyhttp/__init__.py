"""steadyhttp -- a resilient asynchronous HTTP client.

Requests are issued through :class:`~steadyhttp.client.ResilientClient`,
which enforces a per-attempt timeout, retries failed attempts with
exponential backoff, reports every failed attempt, and caches successful
GET responses in memory for a configurable time-to-live.

Typical usage::

    from steadyhttp import ClientConfig, ResilientClient

    async with ResilientClient(ClientConfig(base_url="https://api.example.com")) as client:
        users = (await client.get("/users")).data

Modules:
    client: The resilient client and its executor / retry components.
    cache: In-memory response cache and background sweeper.
    models: Pydantic models shared across the package.
    reporting: Failure reporting (observability collaborator).
    security: Secret masking and URL / API key validation.
    config: XDG-aware configuration for the CLI.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from steadyhttp.client import ResilientClient  # noqa: E402
from steadyhttp.models import ApiResponse, ClientConfig, RequestSpec  # noqa: E402

__all__ = ["ResilientClient", "ClientConfig", "RequestSpec", "ApiResponse", "__version__"]
