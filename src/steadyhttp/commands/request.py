"""Request commands -- issue one call through :class:`~steadyhttp.client.ResilientClient`.

Each command resolves the effective configuration (see
:func:`~steadyhttp.config.resolve_config`), runs the call on a fresh event
loop, and prints the decoded body to stdout.  A failed call prints the
error to stderr and exits with the error's ``exit_code``.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import typer

from steadyhttp.client import ResilientClient
from steadyhttp.client.response import format_api_response
from steadyhttp.exceptions import (
    InvalidUsageError,
    RequestTimeoutError,
    SteadyHttpError,
)
from steadyhttp.models import ApiResponse, ClientConfig, HTTPMethod, RequestSpec
from steadyhttp.output import (
    OutputFormat,
    OutputManager,
    debug,
    error,
    set_output,
    suggest,
)


def make_client(config: ClientConfig) -> ResilientClient:
    """Build the client used by the request commands."""
    return ResilientClient(config)


def parse_headers(raw: Optional[list[str]]) -> dict[str, str]:
    """Parse ``-H "Name: value"`` options into a dict.

    Raises:
        InvalidUsageError: If an entry has no ``:`` separator or an empty name.
    """
    headers: dict[str, str] = {}
    for item in raw or []:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise InvalidUsageError(f"Invalid header '{item}': expected 'Name: value'")
        headers[name.strip()] = value.strip()
    return headers


def parse_body(body: Optional[str]) -> Any:
    """Parse *body* as JSON if possible, returning the raw string on failure."""
    if body is None:
        return None
    try:
        return json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return body


async def _execute(config: ClientConfig, spec: RequestSpec) -> ApiResponse:
    async with make_client(config) as client:
        return await client.execute(spec)


def _run(
    ctx: typer.Context,
    method: HTTPMethod,
    url: str,
    body: Optional[str] = None,
    header: Optional[list[str]] = None,
    cacheable: bool = False,
) -> None:
    """Resolve config, perform the call, and print the result."""
    from steadyhttp.config import resolve_config

    obj = ctx.obj or {}
    try:
        config = resolve_config(
            cli_client=obj.get("client_overrides"),
            cli_format=obj.get("cli_format"),
        )
        set_output(OutputManager(
            format=OutputFormat(config.output.format),
            **obj.get("output_options", {}),
        ))
        spec = RequestSpec(
            url=url,
            method=method,
            body=parse_body(body),
            headers=parse_headers(header),
            cacheable=cacheable,
            cache_ttl=config.client.cache_ttl,
        )
        debug(f"{method.value} {spec.resolve_url(config.client.base_url)}")
        response = asyncio.run(_execute(config.client, spec))
    except SteadyHttpError as exc:
        error(str(exc))
        if isinstance(exc, RequestTimeoutError):
            suggest("Increase the per-attempt deadline with --timeout.")
        raise typer.Exit(code=exc.exit_code) from None

    format_api_response(response)


def _header_option() -> Any:
    return typer.Option(
        None, "--header", "-H", help="Extra header, e.g. 'Authorization: Bearer x'. Repeatable.",
    )


def get_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path appended to the base URL."),
    header: Optional[list[str]] = _header_option(),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the response cache."),
) -> None:
    """Send a GET request."""
    _run(ctx, HTTPMethod.GET, url, header=header, cacheable=not no_cache)


def post_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path appended to the base URL."),
    body: Optional[str] = typer.Option(None, "--body", "-d", help="JSON request body."),
    header: Optional[list[str]] = _header_option(),
) -> None:
    """Send a POST request."""
    _run(ctx, HTTPMethod.POST, url, body=body, header=header)


def put_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path appended to the base URL."),
    body: Optional[str] = typer.Option(None, "--body", "-d", help="JSON request body."),
    header: Optional[list[str]] = _header_option(),
) -> None:
    """Send a PUT request."""
    _run(ctx, HTTPMethod.PUT, url, body=body, header=header)


def delete_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path appended to the base URL."),
    header: Optional[list[str]] = _header_option(),
) -> None:
    """Send a DELETE request."""
    _run(ctx, HTTPMethod.DELETE, url, header=header)
