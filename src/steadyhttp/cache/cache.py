"""In-memory response caching for GET requests.

:class:`ResponseCache` maps a cache key (see
:meth:`~steadyhttp.models.RequestSpec.cache_key`) to a
:class:`~steadyhttp.models.CacheEntry` with its own time-to-live.  Reads
never evict: an expired entry simply reads as a miss until
:meth:`ResponseCache.sweep` removes it.

Entries are replaced wholesale on every write, so concurrent readers always
see either the old or the new entry, never a half-written one.

See Also:
    :class:`~steadyhttp.cache.sweeper.CacheSweeper` -- the background task
    that calls :meth:`ResponseCache.sweep` on an interval.
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Optional

from steadyhttp.models import CacheEntry


class ResponseCache:
    """Process-memory cache for decoded GET response bodies.

    Args:
        clock: Zero-argument callable returning the current time in
            seconds.  Defaults to :func:`time.monotonic`; tests pass a
            controllable clock.

    Example::

        cache = ResponseCache()
        cache.store("GET:https://api.example.com/users:", [{"id": 1}], ttl=300)
        entry = cache.lookup("GET:https://api.example.com/users:")
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def lookup(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for *key*, or ``None`` on a miss.

        Expired entries are reported as misses but are left in place.
        """
        entry = self._entries.get(key)
        if entry is None or not entry.is_live(self._clock()):
            return None
        return entry

    def store(self, key: str, value: Any, ttl: float) -> CacheEntry:
        """Insert or overwrite the entry for *key*, stamped with the current time.

        Args:
            key: Cache key.
            value: Decoded response body.
            ttl: Seconds the entry stays live.

        Returns:
            The stored :class:`~steadyhttp.models.CacheEntry`.
        """
        entry = CacheEntry(key=key, value=value, stored_at=self._clock(), ttl=ttl)
        self._entries[key] = entry
        return entry

    def sweep(self) -> int:
        """Remove every entry that is no longer live.

        Expired keys are collected first and then deleted one by one.  A
        key is only deleted if it still maps to the same expired entry, so
        a value re-stored while the sweep runs survives.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        expired = [
            (key, entry) for key, entry in list(self._entries.items())
            if not entry.is_live(now)
        ]
        removed = 0
        for key, entry in expired:
            if self._entries.get(key) is entry:
                del self._entries[key]
                removed += 1
        return removed

    def invalidate(self, key: str) -> None:
        """Remove the entry for *key* if present."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove all entries from the cache."""
        self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``size`` (all stored entries, expired included)
            and ``live`` (entries that would currently be returned).
        """
        now = self._clock()
        return {
            "size": len(self._entries),
            "live": sum(1 for e in self._entries.values() if e.is_live(now)),
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    @staticmethod
    def make_key(method: str, url: str, body: Any = None) -> str:
        """Build a key the same way :meth:`~steadyhttp.models.RequestSpec.cache_key` does."""
        serialized = ""
        if body is not None:
            serialized = json.dumps(body, sort_keys=True, separators=(",", ":"), default=str)
        return f"{method.upper()}:{url}:{serialized}"
