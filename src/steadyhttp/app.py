"""Typer application and CLI entry point for steadyhttp.

This module wires together the top-level Typer application, the request
commands (``get``, ``post``, ``put``, ``delete``) and the ``config`` group.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  It installs a SIGINT handler and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`steadyhttp.config`: Configuration resolution.
    :mod:`steadyhttp.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from steadyhttp import __version__
from steadyhttp.commands.config import config_app
from steadyhttp.commands.request import (
    delete_command,
    get_command,
    post_command,
    put_command,
)
from steadyhttp.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="steadyhttp",
    help="Send HTTP requests with timeouts, retries and response caching.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("get")(get_command)
app.command("post")(post_command)
app.command("put")(put_command)
app.command("delete")(delete_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"steadyhttp {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route library log records to stderr through Rich.

    ``--verbose`` shows DEBUG records (each attempt and retry), ``--quiet``
    hides everything below ERROR, and the default shows WARNING and above
    so failed attempts are visible even when a retry succeeds.
    """
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR

    logger = logging.getLogger("steadyhttp")
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    logger.propagate = False


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", "-b", help="Prefix for relative URLs."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", help="Per-attempt deadline in seconds."
    ),
    retries: Optional[int] = typer.Option(
        None, "--retries", "-r", help="Retries after the first attempt."
    ),
    retry_delay: Optional[float] = typer.Option(
        None, "--retry-delay", help="Base backoff delay in seconds."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print the response body as indented JSON."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Print the response body as tab-separated text."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable colour on stdout and stderr."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only print the body and errors."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every attempt and retry."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write the response body to this file."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~steadyhttp.output.OutputManager` and the
    ``steadyhttp`` logger from CLI flags, and stores client overrides in
    ``ctx.obj`` for the request commands.
    """
    from steadyhttp.output import OutputFormat, OutputManager, set_output

    cli_format: Optional[str] = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    output_options: dict[str, Any] = {
        "no_color": no_color,
        "quiet": quiet,
        "verbose": verbose,
        "output_file": output_file,
    }
    set_output(OutputManager(
        format=OutputFormat(cli_format or OutputFormat.AUTO.value), **output_options,
    ))
    configure_logging(verbose=verbose, quiet=quiet)

    ctx.ensure_object(dict)
    ctx.obj["cli_format"] = cli_format
    ctx.obj["output_options"] = output_options
    ctx.obj["client_overrides"] = {
        "base_url": base_url,
        "timeout": timeout,
        "retries": retries,
        "retry_delay": retry_delay,
    }


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from steadyhttp.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``steadyhttp`` console script.

    :class:`~steadyhttp.exceptions.SteadyHttpError` instances that escape a
    command cause a clean exit with the error's ``exit_code``.  All other
    exceptions produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from steadyhttp.exceptions import SteadyHttpError
        from steadyhttp.output import error

        if isinstance(exc, SteadyHttpError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
