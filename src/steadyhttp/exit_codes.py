"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~steadyhttp.exceptions.SteadyHttpError` subclass.
Shell wrappers can inspect the exit code of the ``steadyhttp`` command to
tell a timeout apart from an HTTP failure without parsing stderr.

Example::

    $ steadyhttp get https://api.example.com/users
    $ echo $?
    6   # EXIT_CONNECTION_ERROR -- every attempt timed out
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an unusable URL."""

EXIT_AUTH_FAILURE = 3
"""The server rejected the request with HTTP 401 or 403."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote server returned an HTTP 5xx error on the final attempt."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
