"""
Rate Limited Scheduler
Runs coroutines under a start-rate ceiling and a concurrency cap.
"""

import asyncio
from typing import Awaitable, Callable, TypeVar

from asyncio_throttle import Throttler

T = TypeVar("T")


class RateLimitedScheduler:
    """
    At most `rate_limit` task starts in any `period` seconds and at most
    `max_concurrent` tasks in flight.

    One instance is created per run and handed to the component that owns it.
    """

    def __init__(self, rate_limit: int = 120, period: float = 60.0, max_concurrent: int = 120):
        if rate_limit <= 0 or max_concurrent <= 0 or period <= 0:
            raise ValueError("rate_limit, period and max_concurrent must be positive")
        self.rate_limit = rate_limit
        self.period = period
        self.max_concurrent = max_concurrent
        self._throttler = Throttler(rate_limit=rate_limit, period=period)
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self.submitted = 0
        self.in_flight = 0

    async def submit(self, task: Callable[[], Awaitable[T]]) -> T:
        """
        Run one task once a concurrency slot and a rate slot are free.

        Args:
            task: Zero-argument callable returning the coroutine to run

        Returns:
            Whatever the task returns; its exceptions propagate unchanged
        """
        self.submitted += 1
        async with self._semaphore:
            async with self._throttler:
                self.in_flight += 1
                try:
                    return await task()
                finally:
                    self.in_flight -= 1
