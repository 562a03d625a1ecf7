"""Canonical Pydantic models shared across all steadyhttp modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- set once and never mutated:
    :class:`ClientConfig`, :class:`OutputConfig`, and :class:`CliConfig`
    (the latter two are persisted as JSON by :mod:`steadyhttp.config`).

**Per-call models** -- created for one call and discarded afterwards:
    :class:`HTTPMethod`, :class:`RequestSpec`, :class:`FailureKind`,
    :class:`Success`, :class:`Failure`, :class:`RetryDecision`,
    :class:`ApiResponse`, and :class:`FailureReport`.

**Cache models** -- owned exclusively by :class:`~steadyhttp.cache.ResponseCache`:
    :class:`CacheEntry`.

All per-call and cache models are frozen; instances are replaced, never
mutated.
"""

from __future__ import annotations

import enum
import json
import re
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CACHE_TTL = 300.0
"""Default time-to-live (seconds) for cacheable GET responses."""

_ABSOLUTE_URL = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


# --- Configuration ---


class ClientConfig(BaseModel):
    """Process-wide settings held by a :class:`~steadyhttp.client.ResilientClient`.

    Frozen: changing any setting means constructing a new client.

    Example::

        ClientConfig(base_url="https://api.example.com", timeout=5, retries=2)
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        default="", description="Prefix for relative request URLs"
    )
    timeout: float = Field(
        default=30.0, gt=0, description="Per-attempt deadline in seconds"
    )
    retries: int = Field(
        default=3, ge=0, description="Retries after the first attempt"
    )
    retry_delay: float = Field(
        default=1.0, ge=0, description="Base backoff delay in seconds"
    )
    cache_ttl: float = Field(
        default=DEFAULT_CACHE_TTL, gt=0, description="Default TTL for cacheable GETs"
    )
    cleanup_interval: float = Field(
        default=60.0, gt=0, description="Seconds between background cache sweeps"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`CliConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class CliConfig(BaseModel):
    """User-wide CLI configuration persisted at ``~/.config/steadyhttp/config.json``.

    Loaded and saved by :func:`~steadyhttp.config.load_cli_config` and
    :func:`~steadyhttp.config.save_cli_config`.  See
    :func:`~steadyhttp.config.resolve_config` for the precedence chain.
    """

    client: ClientConfig = Field(default_factory=ClientConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Requests ---


class HTTPMethod(str, enum.Enum):
    """HTTP verbs the client issues."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class RequestSpec(BaseModel):
    """Immutable description of one logical request.

    ``url`` is either absolute (it starts with ``scheme://``) or a path
    that is appended to the client's ``base_url``.  ``cacheable`` only has an
    effect for GET requests.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    method: HTTPMethod = HTTPMethod.GET
    body: Any = None
    headers: dict[str, str] = Field(default_factory=dict)
    cacheable: bool = False
    cache_ttl: float = Field(default=DEFAULT_CACHE_TTL, gt=0)

    def resolve_url(self, base_url: str = "") -> str:
        """Return the absolute URL, joining relative paths onto ``base_url``.

        Only a URL that *starts* with a scheme (``https://...``) is taken as
        absolute; a URL inside the query string (``/r?to=https://x``) does
        not count.  Relative paths are joined with exactly one ``/``, so
        ``"https://h/"`` and ``"/users"`` give ``"https://h/users"``.
        """
        if _ABSOLUTE_URL.match(self.url) or not base_url:
            return self.url
        return f"{base_url.rstrip('/')}/{self.url.lstrip('/')}"

    def serialized_body(self) -> str:
        """Canonical JSON encoding of ``body`` (empty string when absent)."""
        if self.body is None:
            return ""
        return json.dumps(self.body, sort_keys=True, separators=(",", ":"), default=str)

    def cache_key(self, base_url: str = "") -> str:
        """Derive the cache key from method, resolved URL and serialised body."""
        return f"{self.method.value}:{self.resolve_url(base_url)}:{self.serialized_body()}"


# --- Attempt outcomes ---


class FailureKind(str, enum.Enum):
    """Why a single attempt failed."""

    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    HTTP_ERROR = "http_error"


class Success(BaseModel):
    """A 2xx response with its decoded body."""

    model_config = ConfigDict(frozen=True)

    status: int
    status_text: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None


class Failure(BaseModel):
    """A failed attempt.  ``status`` is only set for :attr:`FailureKind.HTTP_ERROR`."""

    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    message: str
    status: Optional[int] = None


AttemptOutcome = Union[Success, Failure]
"""Result of one :meth:`~steadyhttp.client.executor.RequestExecutor.attempt`."""


class RetryDecision(BaseModel):
    """Verdict of :meth:`~steadyhttp.client.retry.RetryController.decide`."""

    model_config = ConfigDict(frozen=True)

    retry: bool
    delay: float = 0.0


# --- Call results ---


class ApiResponse(BaseModel):
    """What a successful call returns to the caller."""

    model_config = ConfigDict(frozen=True)

    data: Any = None
    status: int
    status_text: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    from_cache: bool = False


class FailureReport(BaseModel):
    """Structured record handed to the error reporter for every failed attempt."""

    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    message: str
    attempt_index: int
    target_url: str
    timestamp: float
    duration: float = Field(default=0.0, ge=0, description="Seconds the attempt took")


# --- Cache ---


class CacheEntry(BaseModel):
    """One cached value.  Live while ``now - stored_at < ttl``."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: Any = None
    stored_at: float
    ttl: float

    def is_live(self, now: float) -> bool:
        """Return ``True`` if the entry has not yet expired at *now*."""
        return now - self.stored_at < self.ttl
