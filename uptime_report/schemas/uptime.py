"""Pydantic schemas for checks, date ranges, outages and uptime results."""

from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _to_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Check(BaseModel):
    """A single monitored target as listed by the provider."""
    model_config = ConfigDict(frozen=True)

    id: Union[int, str]
    name: str


class DateRange(BaseModel):
    """
    Reporting window, stored as UTC instants.

    Built from calendar dates with day granularity: the start date is
    included from midnight and the end date is included up to the next
    midnight, so a single-day range covers 1440 minutes.
    """
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator('start', 'end')
    @classmethod
    def normalize_to_utc(cls, v):
        return _to_utc(v)

    @model_validator(mode='after')
    def start_must_not_follow_end(self):
        if self.start > self.end:
            raise ValueError('start must not be after end')
        return self

    @classmethod
    def from_dates(cls, start_date: date, end_date: date) -> "DateRange":
        """
        Create an inclusive day-granular range.

        Args:
            start_date: First reported day
            end_date: Last reported day (included in full)

        Returns:
            DateRange: Range from start_date 00:00 UTC to the midnight after end_date
        """
        return cls(
            start=datetime.combine(start_date, time.min, tzinfo=timezone.utc),
            end=datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc),
        )

    @property
    def from_timestamp(self) -> int:
        """Start as unix seconds, as the provider expects it."""
        return int(self.start.timestamp())

    @property
    def to_timestamp(self) -> int:
        """End as unix seconds, as the provider expects it."""
        return int(self.end.timestamp())

    @property
    def last_day(self) -> date:
        """Last calendar day covered by the range."""
        if self.end > self.start and self.end.time() == time.min:
            return (self.end - timedelta(days=1)).date()
        return self.end.date()


class OutageInterval(BaseModel):
    """A period during which a check was reported down."""
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator('start', 'end')
    @classmethod
    def normalize_to_utc(cls, v):
        return _to_utc(v)

    @model_validator(mode='after')
    def start_must_not_follow_end(self):
        if self.start > self.end:
            raise ValueError('outage start must not be after its end')
        return self

    @classmethod
    def from_timestamps(cls, time_from: int, time_to: int) -> "OutageInterval":
        """Create an interval from unix timestamps."""
        return cls(
            start=datetime.fromtimestamp(time_from, tz=timezone.utc),
            end=datetime.fromtimestamp(time_to, tz=timezone.utc),
        )

    @property
    def duration_seconds(self) -> float:
        return (self.end - self.start).total_seconds()


class ResultStatus(str, Enum):
    """Outcome of processing a single check."""
    OK = "ok"
    FAILED = "failed"


class UptimeResult(BaseModel):
    """
    Uptime figures for one check over the reporting window.

    Failed results carry a reason and no metrics.
    """
    model_config = ConfigDict(frozen=True)

    check_id: Union[int, str]
    check_name: str
    uptime_percent: Optional[float] = Field(default=None, ge=0, le=100)
    downtime_minutes: Optional[int] = Field(default=None, ge=0)
    status: ResultStatus = ResultStatus.OK
    reason: Optional[str] = None

    @model_validator(mode='after')
    def metrics_required_when_ok(self):
        if self.status == ResultStatus.OK:
            if self.uptime_percent is None or self.downtime_minutes is None:
                raise ValueError('ok results must carry uptime_percent and downtime_minutes')
        elif not self.reason:
            raise ValueError('failed results must carry a reason')
        return self

    @classmethod
    def failed(cls, check: Check, reason: str) -> "UptimeResult":
        """Build a failed result for a check."""
        return cls(
            check_id=check.id,
            check_name=check.name,
            status=ResultStatus.FAILED,
            reason=reason,
        )

    @property
    def is_ok(self) -> bool:
        return self.status == ResultStatus.OK
