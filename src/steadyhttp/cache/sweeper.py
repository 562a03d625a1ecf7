"""Background task that periodically sweeps expired cache entries."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from steadyhttp.cache.cache import ResponseCache

logger = logging.getLogger(__name__)


class CacheSweeper:
    """Runs :meth:`ResponseCache.sweep` every *interval* seconds on the running loop.

    The sweeper is owned by a :class:`~steadyhttp.client.ResilientClient`:
    started when the client is entered and stopped (cancelled and awaited)
    when it is closed, so no task outlives its owner.

    Args:
        cache: The cache to sweep.
        interval: Seconds between sweeps.
    """

    def __init__(self, cache: ResponseCache, interval: float = 60.0) -> None:
        self._cache = cache
        self._interval = interval
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        """Whether the background task is active."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep loop.  Calling it again while running is a no-op."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="steadyhttp-cache-sweeper"
        )

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            removed = self._cache.sweep()
            if removed:
                logger.debug("Cache sweep removed %d expired entries", removed)
