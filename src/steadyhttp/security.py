"""Helpers for handling secrets and untrusted URLs.

* :data:`PROVIDER_KEY_PATTERNS` -- a static table of API key formats keyed
  by provider id.  Support for a new provider is added by adding an entry,
  not by branching in :func:`validate_api_key`.
* :func:`mask_sensitive_data` -- scrubs API keys and token-like fields from
  strings and nested dicts/lists before they reach a log.
* :func:`validate_url` -- checks that a URL is absolute ``http(s)`` with a
  host.
* :func:`create_rate_limiter` -- per-key sliding-window request limiter;
  :data:`api_rate_limiter` allows 100 requests per key per minute.
* :func:`generate_secure_id` -- random alphanumeric ids from :mod:`secrets`.
"""

from __future__ import annotations

import re
import secrets
import string
import time
from typing import Any, Callable
from urllib.parse import urlsplit

_KEY_BODY = r"[a-zA-Z0-9]{32,}"

PROVIDER_KEY_PATTERNS: dict[str, re.Pattern[str]] = {
    "openai": re.compile(rf"^sk-{_KEY_BODY}$"),
    "openrouter": re.compile(rf"^sk-or-v1-{_KEY_BODY}$"),
    "anthropic": re.compile(rf"^sk-ant-{_KEY_BODY}$"),
    "groq": re.compile(rf"^gsk_{_KEY_BODY}$"),
    "deepseek": re.compile(rf"^sk-{_KEY_BODY}$"),
    "mistral": re.compile(rf"^{_KEY_BODY}$"),
    "cohere": re.compile(rf"^{_KEY_BODY}$"),
    "perplexity": re.compile(rf"^pplx-{_KEY_BODY}$"),
    "together": re.compile(rf"^{_KEY_BODY}$"),
    "fireworks": re.compile(rf"^{_KEY_BODY}$"),
    "xai": re.compile(rf"^xai-{_KEY_BODY}$"),
    "deepinfra": re.compile(rf"^{_KEY_BODY}$"),
    "replicate": re.compile(rf"^r8_{_KEY_BODY}$"),
}
"""Expected API key format per provider id."""

_SECRET_IN_TEXT = re.compile(r"sk-[a-zA-Z0-9]{8,}")
_MASK = "***"


def validate_api_key(api_key: str, provider: str) -> bool:
    """Check *api_key* against the format registered for *provider*.

    Args:
        api_key: The key to check.
        provider: Provider id (a key of :data:`PROVIDER_KEY_PATTERNS`).

    Returns:
        ``False`` for an empty key or one that does not match the
        provider's pattern.  ``True`` when the key matches, or when the
        provider has no registered pattern.
    """
    if not api_key or not isinstance(api_key, str):
        return False
    pattern = PROVIDER_KEY_PATTERNS.get(provider)
    if pattern is None:
        return True
    return pattern.match(api_key) is not None


def mask_sensitive_data(data: Any) -> Any:
    """Return a copy of *data* with secrets masked.

    Strings have ``sk-...`` style keys replaced with ``sk-***``.  Mapping
    values whose key contains ``key`` or ``token`` (case-insensitive) are
    replaced with ``***``; other values are masked recursively.  Lists and
    tuples are masked element-wise.  Anything else is returned unchanged.
    """
    if isinstance(data, str):
        return _SECRET_IN_TEXT.sub(f"sk-{_MASK}", data)
    if isinstance(data, dict):
        masked: dict[Any, Any] = {}
        for key, value in data.items():
            lowered = str(key).lower()
            if "key" in lowered or "token" in lowered:
                masked[key] = _MASK
            else:
                masked[key] = mask_sensitive_data(value)
        return masked
    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item) for item in data)
    return data


def validate_url(url: str) -> bool:
    """Return ``True`` if *url* is an absolute ``http``/``https`` URL with a host."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def create_rate_limiter(
    max_requests: int,
    window: float,
    clock: Callable[[], float] = time.monotonic,
) -> Callable[[str], bool]:
    """Build a sliding-window limiter.

    Args:
        max_requests: Requests allowed per key inside any *window*.
        window: Window length in seconds.
        clock: Time source in seconds.

    Returns:
        A callable taking a key (a host, a user id) and returning ``True``
        when the request is allowed.  Denied requests are not counted.
    """
    history: dict[str, list[float]] = {}

    def allow(key: str) -> bool:
        now = clock()
        recent = [t for t in history.get(key, ()) if now - t < window]
        if len(recent) >= max_requests:
            history[key] = recent
            return False
        recent.append(now)
        history[key] = recent
        return True

    return allow


api_rate_limiter = create_rate_limiter(100, 60.0)
"""Shared limiter: 100 requests per key per 60 seconds."""

_ID_ALPHABET = string.ascii_letters + string.digits


def generate_secure_id(length: int = 32) -> str:
    """Return a random alphanumeric id of *length* characters."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))
