"""
Command-line entry point.

Usage:
    uptime-report --start-date 01/01/2024 --end-date 12/31/2024
    uptime-report -s 01/01/2024 -e 01/31/2024 --sort name --format json

PINGDOM_API_KEY and PINGDOM_API_URL are read from the environment, a .env
file or the YAML config file.
"""

import argparse
import asyncio
import sys
from datetime import date, datetime
from typing import List, Optional

from uptime_report import __version__
from uptime_report.config import Config, load_config
from uptime_report.core.client import PingdomClient
from uptime_report.core.metrics import MetricsCollector
from uptime_report.core.pipeline import UptimePipeline
from uptime_report.errors import (
    ConfigurationError,
    EnumerationError,
    InvalidRangeError,
)
from uptime_report.report import SORT_ENUMERATION, SORT_NAME, render_json, render_text, sort_results
from uptime_report.schemas.uptime import DateRange, UptimeResult
from uptime_report.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

DATE_FORMAT = "%m/%d/%Y"

EXIT_OK = 0
EXIT_ENUMERATION_FAILED = 1
EXIT_CONFIGURATION = 2


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="uptime-report",
        description="Pingdom uptime calculator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example:
  %(prog)s --start-date 01/01/2024 --end-date 12/31/2024

Note:
  Set PINGDOM_API_KEY and PINGDOM_API_URL in the environment or a .env file.
"""
    )

    parser.add_argument(
        "-s", "--start-date",
        required=True,
        help="First day of the report in MM/DD/YYYY format (e.g., 01/01/2024)"
    )
    parser.add_argument(
        "-e", "--end-date",
        required=True,
        help="Last day of the report in MM/DD/YYYY format (e.g., 12/31/2024)"
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to a YAML config file"
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )
    parser.add_argument(
        "--sort",
        choices=[SORT_ENUMERATION, SORT_NAME],
        default=SORT_ENUMERATION,
        help="Row order (default: provider order)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override the configured log level"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def parse_date(value: str) -> date:
    """
    Parse an MM/DD/YYYY date.

    Raises:
        ConfigurationError: If the value is not a valid date in that format
    """
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError as e:
        raise ConfigurationError(f"Invalid date '{value}', expected MM/DD/YYYY") from e


def build_date_range(start_value: str, end_value: str) -> DateRange:
    """
    Validate user dates and build the reporting window.

    Raises:
        ConfigurationError: On bad syntax or an end date before the start date
    """
    start_date = parse_date(start_value)
    end_date = parse_date(end_value)

    if start_date > end_date:
        raise ConfigurationError(
            f"Start date {start_value} is after end date {end_value}"
        )

    return DateRange.from_dates(start_date, end_date)


async def generate_report(
    config: Config,
    date_range: DateRange,
    metrics: Optional[MetricsCollector] = None
) -> List[UptimeResult]:
    """Run the pipeline against the configured provider."""
    async with PingdomClient(
        api_url=config.provider.api_url,
        api_key=config.provider.api_key,
        timeout=config.provider.timeout,
        max_connections=config.pipeline.max_concurrency,
        metrics=metrics
    ) as client:
        pipeline = UptimePipeline(
            client,
            max_concurrency=config.pipeline.max_concurrency,
            request_interval=config.pipeline.request_interval,
            run_timeout=config.pipeline.run_timeout,
            metrics=metrics
        )
        return await pipeline.run(date_range)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit status."""
    args = create_parser().parse_args(argv)

    try:
        date_range = build_date_range(args.start_date, args.end_date)
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION

    setup_logging(
        level=args.log_level or config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file,
        console=config.logging.console
    )

    metrics = MetricsCollector() if config.metrics.enabled else None

    logger.info(
        "Starting uptime report",
        extra={
            "from": date_range.start.isoformat(),
            "to": date_range.end.isoformat(),
            "api_url": config.provider.api_url
        }
    )

    try:
        results = asyncio.run(generate_report(config, date_range, metrics))
    except InvalidRangeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION
    except EnumerationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ENUMERATION_FAILED

    results = sort_results(results, args.sort)

    if args.format == "json":
        print(render_json(date_range, results))
    else:
        print(render_text(date_range, results))

    if metrics and config.metrics.textfile:
        metrics.write_textfile(config.metrics.textfile)

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
