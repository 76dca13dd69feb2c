"""Bounded worker pool that fans work out and collects tagged outcomes."""

import asyncio
import time
from typing import Awaitable, Callable, Optional, Sequence, TypeVar, Union

from uptime_report.core.metrics import MetricsCollector
from uptime_report.core.rate_limiter import RateLimiter
from uptime_report.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')
R = TypeVar('R')


class WorkerPool:
    """
    Fixed-size pool of workers draining a shared queue of pending items.

    Every unit of work acquires a slot from the shared rate limiter before
    it starts, so throughput is bounded both by ``max_concurrency`` and by
    the limiter's interval. Outcomes are pushed to a completion queue tagged
    with the item's original position; a raised exception is delivered as
    the outcome instead of propagating, so one failing unit never stops its
    siblings.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        max_concurrency: int = 10,
        metrics: Optional[MetricsCollector] = None
    ):
        """
        Initialize worker pool.

        Args:
            rate_limiter: Shared pacing gate
            max_concurrency: Maximum units of work in flight
            metrics: Optional metrics collector
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self.rate_limiter = rate_limiter
        self.max_concurrency = max_concurrency
        self.metrics = metrics
        self.in_flight = 0
        self.peak_in_flight = 0

    async def run(
        self,
        items: Sequence[T],
        work: Callable[[T], Awaitable[R]],
        on_complete: Callable[[int, Union[R, Exception]], None]
    ) -> None:
        """
        Execute ``work`` for every item and report each outcome.

        ``on_complete`` is called from this coroutine only, in completion
        order, once per item. If it raises, or if this coroutine is
        cancelled, all outstanding workers are cancelled before returning.

        Args:
            items: Ordered items to process
            work: Coroutine function applied to each item
            on_complete: Receives (original index, result or exception)
        """
        items = list(items)
        if not items:
            return

        pending: asyncio.Queue = asyncio.Queue()
        completed: asyncio.Queue = asyncio.Queue()

        for index, item in enumerate(items):
            pending.put_nowait((index, item))

        worker_count = min(self.max_concurrency, len(items))
        workers = [
            asyncio.create_task(self._worker(pending, completed, work))
            for _ in range(worker_count)
        ]

        logger.info(
            "Worker pool started",
            extra={"items": len(items), "workers": worker_count}
        )

        try:
            for _ in range(len(items)):
                index, outcome = await completed.get()
                on_complete(index, outcome)
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

            if self.metrics:
                self.metrics.update_peak_in_flight(self.peak_in_flight)

        logger.info(
            "Worker pool finished",
            extra={"items": len(items), "peak_in_flight": self.peak_in_flight}
        )

    async def _worker(
        self,
        pending: asyncio.Queue,
        completed: asyncio.Queue,
        work: Callable[[T], Awaitable[R]]
    ) -> None:
        while True:
            try:
                index, item = pending.get_nowait()
            except asyncio.QueueEmpty:
                return

            wait_started = time.monotonic()
            await self.rate_limiter.acquire()
            if self.metrics:
                self.metrics.record_rate_limiter_wait(time.monotonic() - wait_started)

            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
            try:
                outcome = await work(item)
            except Exception as e:
                logger.exception(
                    "Unit of work raised",
                    extra={"index": index, "error": str(e)}
                )
                outcome = e
            finally:
                self.in_flight -= 1

            completed.put_nowait((index, outcome))
