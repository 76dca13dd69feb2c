"""Collects per-check outcomes and restores enumeration order."""

from typing import Dict, List, Sequence

from uptime_report.errors import FetchError, InvalidRangeError
from uptime_report.schemas.uptime import Check, UptimeResult
from uptime_report.utils.logger import get_logger

logger = get_logger(__name__)

TIMEOUT_REASON = "Timeout"


class ResultAggregator:
    """
    Single-threaded merge point for results produced by the worker pool.

    Outcomes arrive in completion order tagged with the check's position in
    the enumeration. Exceptions become failed results for that check only,
    except InvalidRangeError which is fatal for the whole run.
    """

    def __init__(self, checks: Sequence[Check]):
        self.checks = list(checks)
        self._results: Dict[int, UptimeResult] = {}

    def add(self, index: int, outcome) -> None:
        """
        Record the outcome for the check at ``index``.

        Args:
            index: Position of the check in the enumeration
            outcome: UptimeResult or the exception raised while producing it

        Raises:
            InvalidRangeError: Re-raised when it is the outcome
            IndexError: If index does not refer to an enumerated check
            ValueError: If the check already has a result
        """
        if not 0 <= index < len(self.checks):
            raise IndexError(f"No check at position {index}")
        if index in self._results:
            raise ValueError(f"Duplicate result for check at position {index}")

        if isinstance(outcome, InvalidRangeError):
            raise outcome

        check = self.checks[index]
        if isinstance(outcome, UptimeResult):
            result = outcome
        elif isinstance(outcome, FetchError):
            result = UptimeResult.failed(check, outcome.cause.value)
        elif isinstance(outcome, Exception):
            result = UptimeResult.failed(check, f"{type(outcome).__name__}: {outcome}")
        else:
            raise TypeError(f"Unsupported outcome type {type(outcome).__name__}")

        self._results[index] = result

    @property
    def completed(self) -> int:
        return len(self._results)

    def results(self) -> List[UptimeResult]:
        """
        Final report rows, one per enumerated check, in enumeration order.

        Checks that never produced an outcome are reported as failed with
        reason ``Timeout``.
        """
        missing = len(self.checks) - len(self._results)
        if missing:
            logger.warning("Checks without a result", extra={"missing": missing})

        return [
            self._results[index] if index in self._results
            else UptimeResult.failed(check, TIMEOUT_REASON)
            for index, check in enumerate(self.checks)
        ]
