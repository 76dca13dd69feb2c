"""Uptime calculator turning raw outage intervals into uptime figures."""

import math
from datetime import datetime
from typing import Iterable, List, Tuple

from uptime_report.errors import InvalidRangeError
from uptime_report.schemas.uptime import Check, DateRange, OutageInterval, UptimeResult
from uptime_report.utils.logger import get_logger

logger = get_logger(__name__)

Span = Tuple[datetime, datetime]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


class UptimeCalculator:
    """
    Calculator for check uptime over a fixed reporting window.

    Outage intervals are clipped to the window and merged before summing,
    since the provider can report overlapping outages for one check.

    Example:
        ```python
        calculator = UptimeCalculator()
        result = calculator.calculate(check, date_range, outages)
        print(f"{result.check_name}: {result.uptime_percent:.3f}%")
        ```
    """

    PRECISION = 3

    @staticmethod
    def total_minutes(date_range: DateRange) -> float:
        """
        Length of the window in minutes.

        Raises:
            InvalidRangeError: If the window has no positive duration
        """
        minutes = (date_range.end - date_range.start).total_seconds() / 60
        if minutes <= 0:
            raise InvalidRangeError(
                f"Date range {date_range.start.isoformat()} - {date_range.end.isoformat()} "
                f"has no positive duration"
            )
        return minutes

    @staticmethod
    def clip(date_range: DateRange, intervals: Iterable[OutageInterval]) -> List[Span]:
        """Clip intervals to the window, dropping the ones left empty."""
        clipped = []
        for interval in intervals:
            start = max(interval.start, date_range.start)
            end = min(interval.end, date_range.end)
            if start < end:
                clipped.append((start, end))
        return clipped

    @staticmethod
    def merge(spans: Iterable[Span]) -> List[Span]:
        """Coalesce overlapping or touching spans."""
        merged: List[Span] = []
        for start, end in sorted(spans):
            if merged and start <= merged[-1][1]:
                if end > merged[-1][1]:
                    merged[-1] = (merged[-1][0], end)
            else:
                merged.append((start, end))
        return merged

    def downtime_minutes(
        self,
        date_range: DateRange,
        intervals: Iterable[OutageInterval]
    ) -> int:
        """Whole minutes of merged downtime inside the window."""
        merged = self.merge(self.clip(date_range, intervals))
        seconds = sum((end - start).total_seconds() for start, end in merged)
        return round_half_up(seconds / 60)

    def calculate(
        self,
        check: Check,
        date_range: DateRange,
        intervals: Iterable[OutageInterval]
    ) -> UptimeResult:
        """
        Calculate uptime for one check.

        Args:
            check: Check the outages belong to
            date_range: Reporting window
            intervals: Raw outage intervals, in any order, possibly overlapping

        Returns:
            UptimeResult: Ok result with percentage and downtime minutes

        Raises:
            InvalidRangeError: If the window has no positive duration
        """
        total = self.total_minutes(date_range)
        downtime = min(self.downtime_minutes(date_range, intervals), round_half_up(total))

        uptime = 100 * (total - downtime) / total
        uptime = round(min(max(uptime, 0.0), 100.0), self.PRECISION)

        logger.debug(
            "Calculated uptime",
            extra={
                "check_id": check.id,
                "check_name": check.name,
                "uptime": uptime,
                "downtime_minutes": downtime,
                "total_minutes": total
            }
        )

        return UptimeResult(
            check_id=check.id,
            check_name=check.name,
            uptime_percent=uptime,
            downtime_minutes=downtime,
        )
