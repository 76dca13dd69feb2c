"""Async HTTP client for the Pingdom API."""

import asyncio
import time
from typing import Any, Dict, Optional

import aiohttp

from uptime_report.core.metrics import MetricsCollector
from uptime_report.errors import FailureCause, ProviderError
from uptime_report.utils.logger import get_logger

logger = get_logger(__name__)


class PingdomClient:
    """
    Thin transport over the Pingdom REST API.

    Owns one aiohttp session carrying the bearer token. Every failure is
    raised as a ProviderError with a FailureCause so callers can decide
    whether it is fatal or per-check.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        timeout: int = 30,
        max_connections: int = 10,
        metrics: Optional[MetricsCollector] = None
    ):
        """
        Initialize the client.

        Args:
            api_url: Base URL, e.g. https://api.pingdom.com/api/3.1
            api_key: API token sent as a bearer token
            timeout: Total request timeout in seconds
            max_connections: Connection pool size
            metrics: Optional metrics collector
        """
        self.api_url = api_url.rstrip("/")
        self._api_key = api_key
        self.timeout = timeout
        self.max_connections = max_connections
        self.metrics = metrics
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self) -> None:
        """Start the HTTP session."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                connector=aiohttp.TCPConnector(limit=self.max_connections)
            )
            logger.debug("HTTP session started", extra={"api_url": self.api_url})

    async def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None
            logger.debug("HTTP session closed")

    async def get_checks(self) -> Dict[str, Any]:
        """GET /checks."""
        return await self._get("checks", "/checks")

    async def get_outage_summary(self, check_id, time_from: int, time_to: int) -> Dict[str, Any]:
        """GET /summary.outage/{check_id} for the given unix-second window."""
        return await self._get(
            "outage",
            f"/summary.outage/{check_id}",
            params={"from": str(time_from), "to": str(time_to)}
        )

    async def _get(
        self,
        operation: str,
        path: str,
        params: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Perform a GET request and decode the JSON body.

        Raises:
            ProviderError: On connection failure, timeout, non-2xx status or
                a body that is not a JSON object
        """
        if not self.session:
            await self.start()

        url = f"{self.api_url}{path}"
        start_time = time.monotonic()
        outcome = "success"

        try:
            async with self.session.get(url, params=params) as response:
                if response.status >= 400:
                    text = await response.text(errors="replace")
                    raise ProviderError(
                        self._cause_for_status(response.status),
                        f"{response.status} from {path}: {text[:200]}",
                        status_code=response.status
                    )

                try:
                    body = await response.json(content_type=None)
                except ValueError as e:
                    raise ProviderError(
                        FailureCause.MALFORMED,
                        f"Invalid JSON from {path}: {e}",
                        status_code=response.status
                    ) from e

            if not isinstance(body, dict):
                raise ProviderError(
                    FailureCause.MALFORMED,
                    f"Expected a JSON object from {path}, got {type(body).__name__}"
                )

            return body

        except ProviderError as e:
            outcome = e.cause.value
            raise

        except asyncio.TimeoutError as e:
            outcome = FailureCause.NETWORK.value
            raise ProviderError(
                FailureCause.NETWORK,
                f"Request to {path} timed out after {self.timeout}s"
            ) from e

        except aiohttp.ClientError as e:
            outcome = FailureCause.NETWORK.value
            raise ProviderError(
                FailureCause.NETWORK,
                f"Connection error on {path}: {e}"
            ) from e

        finally:
            duration = time.monotonic() - start_time
            if self.metrics:
                self.metrics.record_provider_request(operation, outcome, duration)
            logger.debug(
                "Provider request completed",
                extra={
                    "operation": operation,
                    "path": path,
                    "outcome": outcome,
                    "duration": round(duration, 4)
                }
            )

    @staticmethod
    def _cause_for_status(status: int) -> FailureCause:
        if status in (401, 403):
            return FailureCause.AUTH
        if status == 429:
            return FailureCause.RATE_LIMITED
        return FailureCause.HTTP
