"""Enumeration of the checks monitored by the provider."""

from typing import List

from pydantic import ValidationError

from uptime_report.core.client import PingdomClient
from uptime_report.errors import EnumerationError, ProviderError
from uptime_report.schemas.uptime import Check
from uptime_report.utils.logger import get_logger

logger = get_logger(__name__)


class CheckEnumerator:
    """Lists every check once, in the order the provider returns them."""

    def __init__(self, client: PingdomClient):
        self.client = client

    async def list_checks(self) -> List[Check]:
        """
        Retrieve all monitored checks.

        Returns:
            list[Check]: Checks in provider order

        Raises:
            EnumerationError: On transport or authentication failure, or a
                response body without a well-formed ``checks`` list
        """
        try:
            body = await self.client.get_checks()
        except ProviderError as e:
            logger.error(
                "Failed to list checks",
                extra={"cause": e.cause.value, "error": str(e)}
            )
            raise EnumerationError(f"Cannot list checks ({e.cause.value}): {e}") from e

        raw_checks = body.get("checks")
        if not isinstance(raw_checks, list):
            raise EnumerationError("Malformed checks response: missing 'checks' list")

        checks = []
        for position, raw in enumerate(raw_checks):
            if not isinstance(raw, dict):
                raise EnumerationError(f"Malformed check entry at position {position}")
            try:
                checks.append(Check(id=raw.get("id"), name=raw.get("name")))
            except ValidationError as e:
                raise EnumerationError(
                    f"Malformed check entry at position {position}: {e}"
                ) from e

        logger.info("Enumerated checks", extra={"count": len(checks)})

        return checks
