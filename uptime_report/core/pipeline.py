"""Fetch-and-aggregate pipeline producing one uptime result per check."""

import asyncio
from typing import List, Optional

from uptime_report.core.aggregator import ResultAggregator
from uptime_report.core.checks import CheckEnumerator
from uptime_report.core.client import PingdomClient
from uptime_report.core.metrics import MetricsCollector
from uptime_report.core.outages import OutageFetcher
from uptime_report.core.rate_limiter import RateLimiter
from uptime_report.core.uptime import UptimeCalculator
from uptime_report.core.worker_pool import WorkerPool
from uptime_report.errors import FetchError
from uptime_report.schemas.uptime import Check, DateRange, UptimeResult
from uptime_report.utils.logger import get_logger

logger = get_logger(__name__)


class UptimePipeline:
    """
    Enumerates checks, fetches their outages concurrently and aggregates
    uptime results in enumeration order.

    Example:
        ```python
        async with PingdomClient(api_url, api_key) as client:
            pipeline = UptimePipeline(client)
            results = await pipeline.run(DateRange.from_dates(start, end))
        ```
    """

    def __init__(
        self,
        client: PingdomClient,
        max_concurrency: int = 10,
        request_interval: float = 0.2,
        run_timeout: Optional[float] = None,
        metrics: Optional[MetricsCollector] = None,
        rate_limiter: Optional[RateLimiter] = None,
        calculator: Optional[UptimeCalculator] = None
    ):
        """
        Initialize the pipeline.

        Args:
            client: Provider client shared by enumeration and fetches
            max_concurrency: Maximum simultaneous outage fetches
            request_interval: Minimum seconds between provider requests
            run_timeout: Seconds after which unfinished checks are marked failed
            metrics: Optional metrics collector
            rate_limiter: Shared limiter (built from request_interval if omitted)
            calculator: Uptime calculator
        """
        self.enumerator = CheckEnumerator(client)
        self.fetcher = OutageFetcher(client)
        self.calculator = calculator or UptimeCalculator()
        self.rate_limiter = rate_limiter or RateLimiter(interval=request_interval)
        self.max_concurrency = max_concurrency
        self.run_timeout = run_timeout
        self.metrics = metrics

    async def run(self, date_range: DateRange) -> List[UptimeResult]:
        """
        Produce the ordered uptime report.

        Args:
            date_range: Reporting window

        Returns:
            list[UptimeResult]: One result per check, in enumeration order

        Raises:
            InvalidRangeError: If the window has no positive duration
            EnumerationError: If the checks cannot be listed
        """
        # Reject a degenerate window before any request goes out
        self.calculator.total_minutes(date_range)

        await self.rate_limiter.acquire()
        checks = await self.enumerator.list_checks()
        if self.metrics:
            self.metrics.update_checks_enumerated(len(checks))

        aggregator = ResultAggregator(checks)
        pool = WorkerPool(self.rate_limiter, self.max_concurrency, self.metrics)

        async def process(check: Check) -> UptimeResult:
            try:
                intervals = await self.fetcher.fetch(check, date_range)
            except FetchError as e:
                return UptimeResult.failed(check, e.cause.value)
            return self.calculator.calculate(check, date_range, intervals)

        fan_out = pool.run(checks, process, aggregator.add)
        if self.run_timeout is None:
            await fan_out
        else:
            try:
                await asyncio.wait_for(fan_out, timeout=self.run_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Run timed out, marking unfinished checks as failed",
                    extra={
                        "timeout": self.run_timeout,
                        "completed": aggregator.completed,
                        "total": len(checks)
                    }
                )

        results = aggregator.results()

        if self.metrics:
            for result in results:
                self.metrics.record_check_result(result.status.value)

        failed = sum(1 for r in results if not r.is_ok)
        logger.info(
            "Uptime report complete",
            extra={"checks": len(results), "failed": failed}
        )

        return results
