"""Exception hierarchy for the uptime report pipeline."""

from enum import Enum
from typing import Optional, Union


class UptimeReportError(Exception):
    """Base class for all uptime report errors."""
    pass


class ConfigurationError(UptimeReportError):
    """Raised for missing credentials, invalid config files or invalid dates."""
    pass


class InvalidRangeError(UptimeReportError):
    """Raised when a date range with no positive duration reaches the calculator."""
    pass


class FailureCause(str, Enum):
    """Categories of provider request failures."""
    NETWORK = "network"
    AUTH = "auth"
    MALFORMED = "malformed"
    RATE_LIMITED = "rate_limited"
    HTTP = "http"


class ProviderError(UptimeReportError):
    """
    Raised by the transport for any failed provider request.

    Attributes:
        cause: Failure category
        status_code: HTTP status (None when no response was received)
    """

    def __init__(
        self,
        cause: FailureCause,
        message: str,
        status_code: Optional[int] = None
    ):
        self.cause = cause
        self.status_code = status_code
        super().__init__(message)


class EnumerationError(UptimeReportError):
    """Raised when the list of checks cannot be retrieved. Fatal for the run."""
    pass


class FetchError(UptimeReportError):
    """
    Raised when outage data for a single check cannot be retrieved.

    Recovered per check: the pipeline records it as a failed result.
    """

    def __init__(
        self,
        check_id: Union[int, str],
        cause: FailureCause,
        message: str = ""
    ):
        self.check_id = check_id
        self.cause = cause
        detail = f": {message}" if message else ""
        super().__init__(f"Fetch failed for check {check_id} ({cause.value}){detail}")
