"""Pytest configuration and fixtures."""

import os
import pytest
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from uptime_report.core.client import PingdomClient
from uptime_report.schemas.uptime import Check, DateRange


DAY_START = datetime(2024, 1, 1, tzinfo=timezone.utc)
DAY_START_TS = int(DAY_START.timestamp())


class FakeClock:
    """Deterministic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def outage_state():
    """Build provider state entries, in minutes from 2024-01-01T00:00Z."""
    def _state(start_minute: int, end_minute: int, status: str = "down") -> dict:
        return {
            "status": status,
            "timefrom": DAY_START_TS + start_minute * 60,
            "timeto": DAY_START_TS + end_minute * 60,
        }
    return _state


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def one_day():
    """2024-01-01T00:00Z - 2024-01-02T00:00Z (1440 minutes)."""
    return DateRange.from_dates(date(2024, 1, 1), date(2024, 1, 1))


@pytest.fixture
def sample_checks():
    return [
        Check(id=101, name="Website"),
        Check(id=102, name="API"),
        Check(id=103, name="Checkout"),
    ]


@pytest.fixture
def mock_client(sample_checks):
    """Provider client returning the sample checks and no outages."""
    client = MagicMock(spec=PingdomClient)
    client.get_checks = AsyncMock(return_value={
        "checks": [{"id": c.id, "name": c.name, "status": "up"} for c in sample_checks]
    })
    client.get_outage_summary = AsyncMock(return_value={
        "summary": {"states": [{"status": "up", "timefrom": DAY_START_TS, "timeto": DAY_START_TS + 86400}]}
    })
    return client


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from real credentials, config files and .env."""
    monkeypatch.setattr(os, "environ", os.environ.copy())
    for key in (
        "PINGDOM_API_KEY",
        "PINGDOM_API_URL",
        "CONFIG_PATH",
        "LOG_LEVEL",
        "UPTIME_MAX_CONCURRENCY",
        "UPTIME_REQUEST_INTERVAL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
