"""Uptime Report - concurrent uptime statistics for Pingdom checks."""

__version__ = "1.0.0"
