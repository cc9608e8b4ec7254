"""Tests for the client-side sliding window rate limiter."""

import pytest

from typeahead.application.rate_limiter import SlidingWindowRateLimiter
from typeahead.domain.exceptions import RateLimitExceededError


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestSlidingWindowRateLimiter:

    def setup_method(self):
        self.clock = FakeClock()
        self.limiter = SlidingWindowRateLimiter(max_requests=30, window_seconds=60, clock=self.clock)

    def test_thirty_first_call_in_window_is_refused(self):
        for _ in range(30):
            self.limiter.acquire()
            self.clock.now += 1

        with pytest.raises(RateLimitExceededError) as exc_info:
            self.limiter.acquire()

        assert exc_info.value.limit_value == 30
        assert exc_info.value.retry_after == 30

    def test_window_slides(self):
        for _ in range(30):
            self.limiter.acquire()

        self.clock.now += 60

        self.limiter.acquire()
        assert self.limiter.check().current_usage == 1

    def test_check_does_not_record(self):
        for _ in range(5):
            result = self.limiter.check()

        assert result.allowed is True
        assert result.current_usage == 0
        assert result.remaining == 30

    def test_remaining_counts_down(self):
        self.limiter.acquire()
        self.limiter.acquire()
        assert self.limiter.check().remaining == 28

    def test_reset(self):
        for _ in range(30):
            self.limiter.acquire()

        self.limiter.reset()

        assert self.limiter.check().allowed is True
