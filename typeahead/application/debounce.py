"""
Debounce Scheduler

Delays a suggestion fetch until typing has been quiet for a configured interval.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Set

import structlog

from typeahead.domain.exceptions import InvalidQueryError

logger = structlog.get_logger(__name__)


FireCallback = Callable[[str], Awaitable[None]]
ResetCallback = Callable[[], None]


class DebounceScheduler:
    """
    Coalesces bursts of ``schedule`` calls into one downstream invocation.

    Every call disarms the pending timer and arms a new one. When a timer
    expires it fires ``on_fire`` once with the latest scheduled query. Queries
    shorter than ``min_chars`` disarm the timer and call ``on_reset`` instead,
    so too-short input never reaches the network.
    """

    def __init__(
        self,
        on_fire: FireCallback,
        on_reset: Optional[ResetCallback] = None,
        *,
        delay_ms: int = 300,
        min_chars: int = 2
    ):
        self.on_fire = on_fire
        self.on_reset = on_reset
        self.delay_ms = delay_ms
        self.min_chars = min_chars

        self._latest_query: Optional[str] = None
        self._timer: Optional[asyncio.Task] = None
        self._firing: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def pending(self) -> bool:
        """Whether a timer is armed and has not fired yet."""
        return self._timer is not None and not self._timer.done()

    @property
    def latest_query(self) -> Optional[str]:
        return self._latest_query

    def schedule(self, query: str, delay_ms: Optional[int] = None) -> None:
        """
        Arm the timer for ``query``, replacing any pending one.

        Args:
            query: Current raw input
            delay_ms: Override of the configured quiet period

        Raises:
            InvalidQueryError: If query is not a string
        """
        if not isinstance(query, str):
            raise InvalidQueryError(query)

        if self._closed:
            logger.debug("Schedule ignored after close", query=query)
            return

        self.cancel()
        self._latest_query = query

        if len(query) < self.min_chars or not query.strip():
            if self.on_reset is not None:
                self.on_reset()
            return

        delay = self.delay_ms if delay_ms is None else delay_ms
        self._timer = asyncio.get_running_loop().create_task(self._expire(delay))

    def cancel(self) -> None:
        """Disarm the pending timer, if any."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def close(self) -> None:
        """Tear down: disarm the timer and refuse further scheduling."""
        self.cancel()
        self._closed = True

    async def _expire(self, delay_ms: int) -> None:
        await asyncio.sleep(delay_ms / 1000)

        # Once fired, a later schedule() must not cancel the running callback.
        task = asyncio.current_task()
        if self._timer is task:
            self._timer = None
        if task is not None:
            self._firing.add(task)
            task.add_done_callback(self._firing.discard)

        query = self._latest_query
        if query is None or self._closed:
            return

        logger.debug("Debounce expired", query=query, delay_ms=delay_ms)
        try:
            await self.on_fire(query)
        except Exception as e:
            logger.error("Debounced callback failed", query=query, error=str(e))

    async def drain(self) -> None:
        """Wait for the armed timer and any callback it already started."""
        while True:
            tasks = [t for t in (self._timer, *self._firing) if t is not None and not t.done()]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)
