"""Core pipeline modules for Uptime Report."""

from uptime_report.core.pipeline import UptimePipeline
from uptime_report.core.uptime import UptimeCalculator

__all__ = ["UptimePipeline", "UptimeCalculator"]
