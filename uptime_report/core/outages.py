"""Retrieval of raw outage intervals for a single check."""

from typing import List

from pydantic import ValidationError

from uptime_report.core.client import PingdomClient
from uptime_report.errors import FailureCause, FetchError, ProviderError
from uptime_report.schemas.uptime import Check, DateRange, OutageInterval
from uptime_report.utils.logger import get_logger

logger = get_logger(__name__)

DOWN_STATUS = "down"


class OutageFetcher:
    """
    Fetches the outage summary of one check and extracts its down intervals.

    The provider reports a sequence of state transitions
    (``{"status", "timefrom", "timeto"}``); only ``down`` states count as
    outages. ``up`` and ``unknown`` (unmonitored) time counts as uptime.
    """

    def __init__(self, client: PingdomClient):
        self.client = client

    async def fetch(self, check: Check, date_range: DateRange) -> List[OutageInterval]:
        """
        Fetch outage intervals intersecting the date range.

        Args:
            check: Check to query
            date_range: Reporting window

        Returns:
            list[OutageInterval]: Down intervals, possibly empty

        Raises:
            FetchError: On network, auth, rate-limit or malformed-response failure
        """
        try:
            body = await self.client.get_outage_summary(
                check.id,
                date_range.from_timestamp,
                date_range.to_timestamp
            )
        except ProviderError as e:
            logger.warning(
                "Outage fetch failed",
                extra={
                    "check_id": check.id,
                    "check_name": check.name,
                    "cause": e.cause.value,
                    "error": str(e)
                }
            )
            raise FetchError(check.id, e.cause, str(e)) from e

        intervals = self._parse(check, body)

        logger.debug(
            "Fetched outages",
            extra={"check_id": check.id, "outages": len(intervals)}
        )

        return intervals

    @staticmethod
    def _parse(check: Check, body: dict) -> List[OutageInterval]:
        summary = body.get("summary")
        states = summary.get("states") if isinstance(summary, dict) else None
        if not isinstance(states, list):
            raise FetchError(check.id, FailureCause.MALFORMED, "missing 'summary.states' list")

        intervals = []
        for state in states:
            if not isinstance(state, dict):
                raise FetchError(check.id, FailureCause.MALFORMED, "state entry is not an object")
            if state.get("status") != DOWN_STATUS:
                continue

            time_from = state.get("timefrom")
            time_to = state.get("timeto")
            if not isinstance(time_from, int) or not isinstance(time_to, int):
                raise FetchError(check.id, FailureCause.MALFORMED, "down state without integer timestamps")

            try:
                intervals.append(OutageInterval.from_timestamps(time_from, time_to))
            except ValidationError as e:
                raise FetchError(check.id, FailureCause.MALFORMED, str(e)) from e

        return intervals
