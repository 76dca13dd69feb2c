"""Pydantic schemas for the uptime report domain."""

from uptime_report.schemas.uptime import (
    Check,
    DateRange,
    OutageInterval,
    ResultStatus,
    UptimeResult,
)

__all__ = [
    "Check",
    "DateRange",
    "OutageInterval",
    "ResultStatus",
    "UptimeResult",
]
