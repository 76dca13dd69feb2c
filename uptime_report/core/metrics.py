"""Prometheus metrics collection for an uptime report run."""

from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    write_to_textfile,
)

from uptime_report.utils.logger import get_logger

logger = get_logger(__name__)


class MetricsCollector:
    """Prometheus metrics collector for the fetch pipeline."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics collector.

        Args:
            registry: Optional custom registry
        """
        self.registry = registry or CollectorRegistry()
        self._setup_metrics()
        logger.debug("Prometheus metrics collector initialized")

    def _setup_metrics(self) -> None:
        """Setup all Prometheus metrics."""

        # Provider API Metrics
        self.provider_requests_total = Counter(
            'uptime_report_provider_requests_total',
            'Total number of provider API requests',
            ['operation', 'outcome'],
            registry=self.registry
        )

        self.provider_request_duration = Histogram(
            'uptime_report_provider_request_duration_seconds',
            'Provider API request duration in seconds',
            ['operation'],
            registry=self.registry
        )

        # Pipeline Metrics
        self.check_results_total = Counter(
            'uptime_report_check_results_total',
            'Number of per-check results produced',
            ['status'],
            registry=self.registry
        )

        self.rate_limiter_wait = Histogram(
            'uptime_report_rate_limiter_wait_seconds',
            'Time units of work spent waiting for a dispatch slot',
            buckets=(0.0, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
            registry=self.registry
        )

        self.peak_in_flight = Gauge(
            'uptime_report_peak_in_flight',
            'Highest number of simultaneously running fetches',
            registry=self.registry
        )

        self.checks_enumerated = Gauge(
            'uptime_report_checks_enumerated',
            'Number of checks returned by the provider',
            registry=self.registry
        )

    def record_provider_request(self, operation: str, outcome: str, duration: float) -> None:
        """
        Record a provider request.

        Args:
            operation: Provider call (checks, outage)
            outcome: "success" or a failure cause
            duration: Request duration in seconds
        """
        self.provider_requests_total.labels(
            operation=operation,
            outcome=outcome
        ).inc()

        self.provider_request_duration.labels(operation=operation).observe(duration)

    def record_check_result(self, status: str) -> None:
        self.check_results_total.labels(status=status).inc()

    def record_rate_limiter_wait(self, waited: float) -> None:
        self.rate_limiter_wait.observe(waited)

    def update_peak_in_flight(self, count: int) -> None:
        self.peak_in_flight.set(count)

    def update_checks_enumerated(self, count: int) -> None:
        self.checks_enumerated.set(count)

    def generate_metrics(self) -> bytes:
        """
        Generate Prometheus metrics output.

        Returns:
            bytes: Prometheus metrics in text format
        """
        return generate_latest(self.registry)

    def write_textfile(self, path: str) -> None:
        """
        Write metrics in the node-exporter textfile collector format.

        Args:
            path: Destination file (written atomically)
        """
        write_to_textfile(path, self.registry)
        logger.info("Metrics written", extra={"path": path})
