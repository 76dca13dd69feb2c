"""Utility modules for Uptime Report."""

from uptime_report.utils.logger import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
