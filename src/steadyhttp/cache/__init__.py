"""In-memory response caching for steadyhttp.

This package provides :class:`ResponseCache`, a TTL-bounded map from cache
key to decoded response body, and :class:`CacheSweeper`, the background
task that evicts expired entries.  Cached entries are keyed by HTTP method,
resolved URL and serialised body.

The cache is consumed by :class:`~steadyhttp.client.ResilientClient` and
lives only as long as the client instance; nothing is written to disk.
"""

from steadyhttp.cache.cache import ResponseCache
from steadyhttp.cache.sweeper import CacheSweeper

__all__ = ["ResponseCache", "CacheSweeper"]
