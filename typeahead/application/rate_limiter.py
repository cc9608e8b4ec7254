"""Client-side sliding-window limit on suggestion fetches."""

import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional

import structlog

from typeahead.domain.exceptions import RateLimitExceededError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate limit check."""

    allowed: bool
    max_requests: int
    current_usage: int
    remaining: int
    retry_after: Optional[int] = None


class SlidingWindowRateLimiter:
    """
    Allows at most ``max_requests`` fetches within any ``window_seconds`` span.

    Only fetches that actually reach the network are recorded; cache hits
    and too-short input never count.
    """

    def __init__(
        self,
        max_requests: int = 30,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._timestamps: Deque[float] = deque()

    def check(self) -> RateLimitResult:
        """Report whether another fetch is allowed, without recording it."""
        now = self._clock()
        self._evict(now)

        current = len(self._timestamps)
        allowed = current < self.max_requests
        retry_after = None
        if not allowed:
            retry_after = max(1, math.ceil(self._timestamps[0] + self.window_seconds - now))

        return RateLimitResult(
            allowed=allowed,
            max_requests=self.max_requests,
            current_usage=current,
            remaining=max(0, self.max_requests - current),
            retry_after=retry_after
        )

    def acquire(self) -> None:
        """
        Record one fetch.

        Raises:
            RateLimitExceededError: If the window is already full
        """
        result = self.check()
        if not result.allowed:
            logger.warning(
                "Suggestion rate limit exceeded",
                max_requests=self.max_requests,
                window_seconds=self.window_seconds,
                retry_after=result.retry_after
            )
            raise RateLimitExceededError(
                limit_type="suggestions",
                limit_value=self.max_requests,
                time_window=f"{self.window_seconds:g}s",
                retry_after=result.retry_after
            )

        self._timestamps.append(self._clock())

    def reset(self) -> None:
        self._timestamps.clear()

    def _evict(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self.window_seconds:
            self._timestamps.popleft()
