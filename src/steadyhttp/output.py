"""Terminal output for the ``steadyhttp`` CLI.

Response bodies are the only thing written to stdout, so ``steadyhttp get
... | jq`` always sees clean data.  The status line, errors, suggestions and
debug chatter go to stderr.

Body rendering depends on the resolved :class:`OutputFormat`:

* ``json`` -- indented JSON (strings that hold JSON are re-parsed first).
* ``plain`` -- tab-separated lines, one per dict item or list element.
* ``rich`` -- syntax-highlighted JSON via :mod:`rich`.

``auto`` picks ``rich`` on an interactive, colour-capable terminal and
``plain`` otherwise.  ``NO_COLOR`` (any value), ``TERM=dumb`` and
``--no-color`` all disable colour.

Commands reach the active :class:`OutputManager` through :func:`get_output`
or the module-level shortcuts (:func:`info`, :func:`error`, ...); the root
CLI callback installs it with :func:`set_output`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax


class OutputFormat(str, Enum):
    """How response bodies are rendered."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


class OutputManager:
    """Renders response bodies and diagnostics for one CLI invocation.

    Args:
        format: Body format; ``AUTO`` is resolved at construction time.
        no_color: Force colourless output.
        quiet: Drop the status line, successes and suggestions.  Warnings,
            errors and the body are still written.
        verbose: Show :meth:`debug` messages.
        output_file: Write the body to this path instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._output_file = output_file

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # --- response body (stdout) ---

    def format_response(self, data: Any, content_type: str = "application/json") -> None:
        """Write a decoded response body.

        Args:
            data: The body as returned by the client (dict, list, str, ...).
            content_type: Response media type.  Only consulted in ``rich``
                mode, where non-JSON text is printed verbatim.
        """
        if self._output_file:
            self._write_to_file(data)
        elif self._format == OutputFormat.JSON:
            self._print_json(data)
        elif self._format == OutputFormat.PLAIN:
            self._print_plain(data)
        else:
            self._print_rich(data, content_type)

    def print_data(self, text: str) -> None:
        """Write one line of body text to stdout."""
        print(text, file=sys.stdout, flush=True)

    # --- diagnostics (stderr) ---

    def info(self, message: str) -> None:
        """Status line and other progress notes."""
        if not self._quiet:
            self._diagnostic(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, style="green")

    def warning(self, message: str) -> None:
        self._diagnostic(message, prefix="Warning:", prefix_style="yellow")

    def error(self, message: str) -> None:
        self._diagnostic(message, prefix="Error:", prefix_style="bold red")

    def suggest(self, message: str) -> None:
        """A follow-up hint, e.g. which flag to change after a timeout."""
        if not self._quiet:
            self._diagnostic(f"→ {message}", style="dim")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(f"[debug] {message}", style="dim")

    def _diagnostic(
        self,
        message: str,
        style: Optional[str] = None,
        prefix: Optional[str] = None,
        prefix_style: Optional[str] = None,
    ) -> None:
        if self._no_color:
            text = f"{prefix} {message}" if prefix else message
            print(text, file=sys.stderr, flush=True)
            return
        # Messages are printed without markup parsing so URLs and
        # "[debug]" tags reach the terminal as-is.
        line = self._stderr.render_str(message, markup=False, style=style or "")
        if prefix:
            head = self._stderr.render_str(prefix, markup=False, style=prefix_style or "")
            self._stderr.print(head, line)
        else:
            self._stderr.print(line)

    # --- renderers ---

    def _print_json(self, data: Any) -> None:
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except (json.JSONDecodeError, TypeError):
                self.print_data(data)
                return
        self.print_data(_dump(data))

    def _print_plain(self, data: Any) -> None:
        if isinstance(data, dict):
            lines = [f"{key}\t{value}" for key, value in data.items()]
        elif isinstance(data, list):
            lines = [
                "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
                for item in data
            ]
        else:
            lines = [str(data)]
        for line in lines:
            self.print_data(line)

    def _print_rich(self, data: Any, content_type: str) -> None:
        if isinstance(data, (dict, list)):
            self._stdout.print(Syntax(_dump(data), "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(data), markup=False)

    def _write_to_file(self, data: Any) -> None:
        assert self._output_file is not None
        content = _dump(data) if isinstance(data, (dict, list)) else str(data)
        if not content.endswith("\n"):
            content += "\n"
        with open(self._output_file, "w", encoding="utf-8") as f:
            f.write(content)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` set to anything, or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


# --- process-wide instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the active :class:`OutputManager`, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the active manager so the next :func:`get_output` builds a fresh one."""
    global _output
    _output = None


def format_response(data: Any, content_type: str = "application/json") -> None:
    get_output().format_response(data, content_type)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
