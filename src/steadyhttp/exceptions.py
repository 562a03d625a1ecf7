"""Exception hierarchy for steadyhttp.

All exceptions inherit from :class:`SteadyHttpError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`steadyhttp.exit_codes`.
The CLI entry point in :func:`steadyhttp.app.main` catches
``SteadyHttpError`` and exits with the appropriate code.

A call that exhausts its retries raises a :class:`RequestFailedError`
subclass chosen from the *last* attempt's failure kind, so callers can tell
a timeout from a transport failure from an HTTP status failure.

Subclass hierarchy::

    SteadyHttpError (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- InvalidRequestError     (exit 2)
    +-- ConfigError             (exit 1)
    +-- RequestFailedError      (exit 1)
        +-- RequestTimeoutError (exit 6)
        +-- NetworkError        (exit 6)
        +-- HTTPStatusError     (exit 3 / 4 / 5 / 1 by status)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from steadyhttp.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)

if TYPE_CHECKING:
    from steadyhttp.models import Failure, FailureKind


class SteadyHttpError(Exception):
    """Base exception for all steadyhttp errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`steadyhttp.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SteadyHttpError):
    """Raised for invalid CLI arguments (bad header syntax, unparsable body)."""

    exit_code = EXIT_INVALID_USAGE


class InvalidRequestError(SteadyHttpError):
    """Raised when a request cannot be issued at all.

    Covers URLs that do not resolve to an absolute ``http(s)`` address and
    unsupported HTTP methods.  This is a caller error and is never retried.
    """

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SteadyHttpError):
    """Raised for configuration problems (invalid JSON, bad values, unknown keys)."""

    exit_code = EXIT_GENERIC_FAILURE


class RequestFailedError(SteadyHttpError):
    """Raised when a call fails on every attempt.

    Attributes:
        kind: The :class:`~steadyhttp.models.FailureKind` of the last attempt.
        message: The last attempt's failure message.
        attempts: Total number of attempts made (``retries + 1``).
        status: HTTP status of the last attempt, or ``None`` when no
            response was received.
        url: The resolved target URL.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        attempts: int,
        url: str,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(f"Request to {url} failed after {attempts} attempts: {message}")
        self.kind = kind
        self.message = message
        self.attempts = attempts
        self.url = url
        self.status = status

    @classmethod
    def from_failure(cls, failure: Failure, attempts: int, url: str) -> RequestFailedError:
        """Build the exception matching *failure*'s kind."""
        from steadyhttp.models import FailureKind

        if failure.kind == FailureKind.TIMEOUT:
            return RequestTimeoutError(failure.kind, failure.message, attempts, url)
        if failure.kind == FailureKind.NETWORK_ERROR:
            return NetworkError(failure.kind, failure.message, attempts, url)
        return HTTPStatusError(failure.kind, failure.message, attempts, url, failure.status)


class RequestTimeoutError(RequestFailedError):
    """The last attempt exceeded its deadline."""

    exit_code = EXIT_CONNECTION_ERROR


class NetworkError(RequestFailedError):
    """The last attempt got no usable response (DNS, refused, reset, redirect loop, bad encoding)."""

    exit_code = EXIT_CONNECTION_ERROR


class HTTPStatusError(RequestFailedError):
    """The last attempt received a response with a non-2xx status."""

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        attempts: int,
        url: str,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(kind, message, attempts, url, status)
        if status in (401, 403):
            self.exit_code = EXIT_AUTH_FAILURE
        elif status == 404:
            self.exit_code = EXIT_NOT_FOUND
        elif status is not None and status >= 500:
            self.exit_code = EXIT_SERVER_ERROR
