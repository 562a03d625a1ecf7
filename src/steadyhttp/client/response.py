"""Response formatting bridge -- maps :class:`~steadyhttp.models.ApiResponse` to the output system.

After a CLI call completes, :func:`format_api_response` writes the status
line to stderr and routes the decoded body through
:meth:`~steadyhttp.output.OutputManager.format_response`, which applies the
``--json`` / ``--plain`` / Rich formatting.

See Also:
    :mod:`steadyhttp.output` -- the output manager that renders data.
"""

from __future__ import annotations

from steadyhttp.models import ApiResponse
from steadyhttp.output import get_output


def format_api_response(response: ApiResponse) -> None:
    """Format and print an API response using the global output system.

    Args:
        response: The :class:`~steadyhttp.models.ApiResponse` to display.
    """
    output = get_output()

    output.info(f"HTTP {response.status} {response.status_text}".rstrip())

    if response.data is not None:
        content_type = response.headers.get("content-type", "application/json")
        output.format_response(response.data, content_type)
