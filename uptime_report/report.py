"""Rendering of uptime results for the terminal or as JSON."""

import json
from typing import Iterable, List, Sequence

from uptime_report.schemas.uptime import DateRange, UptimeResult

SORT_ENUMERATION = "enumeration"
SORT_NAME = "name"


def sort_results(results: Sequence[UptimeResult], order: str = SORT_ENUMERATION) -> List[UptimeResult]:
    """Return results in enumeration order or sorted by check name."""
    if order == SORT_NAME:
        return sorted(results, key=lambda r: r.check_name)
    if order == SORT_ENUMERATION:
        return list(results)
    raise ValueError(f"Unknown sort order: {order}")


def format_header(date_range: DateRange) -> str:
    return (
        f"Calculating uptime from {date_range.start:%Y-%m-%d} "
        f"to {date_range.last_day:%Y-%m-%d}"
    )


def format_result(result: UptimeResult) -> str:
    """
    One report line.

    Example:
        ``API, 98.958%, 15 mins`` or ``Website, FAILED (auth)``
    """
    if result.is_ok:
        return f"{result.check_name}, {result.uptime_percent:.3f}%, {result.downtime_minutes} mins"
    return f"{result.check_name}, FAILED ({result.reason})"


def render_text(date_range: DateRange, results: Iterable[UptimeResult]) -> str:
    lines = [format_header(date_range)]
    lines.extend(format_result(r) for r in results)
    return "\n".join(lines)


def render_json(date_range: DateRange, results: Iterable[UptimeResult]) -> str:
    payload = {
        "from": date_range.start.isoformat(),
        "to": date_range.end.isoformat(),
        "results": [r.model_dump(mode="json") for r in results],
    }
    return json.dumps(payload, indent=2)
