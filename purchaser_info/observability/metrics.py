"""
Metrics Collection with Prometheus.

Counts parse outcomes and field-level recoveries so upstream data quality
problems are visible without failing customers.
"""

from enum import Enum

from prometheus_client import Counter, Info

from purchaser_info.config import settings


class MetricLabels(str, Enum):
    """Standard metric label names."""

    OUTCOME = "outcome"
    CONTAINER = "container"
    FIELD = "field"


class PurchaserInfoMetrics:
    """
    Centralized metrics for purchaser record parsing.

    - Records parsed (ok / malformed_record)
    - Malformed date fields recovered locally
    - Entries dropped from a container
    """

    def __init__(self, enabled: bool = True) -> None:
        """Initialize all Prometheus metrics."""
        self.enabled = enabled

        self.service_info = Info(
            "purchaser_info_service",
            "Library information",
        )
        self.service_info.info(
            {
                "version": settings.version,
                "service_name": settings.service_name,
            }
        )

        self.records_parsed_total = Counter(
            "purchaser_info_records_parsed_total",
            "Total raw purchaser records parsed",
            [MetricLabels.OUTCOME],
        )

        self.malformed_fields_total = Counter(
            "purchaser_info_malformed_fields_total",
            "Date or string fields that could not be parsed and were recovered",
            [MetricLabels.CONTAINER, MetricLabels.FIELD],
        )

        self.entries_dropped_total = Counter(
            "purchaser_info_entries_dropped_total",
            "Product or entitlement entries dropped during parsing",
            [MetricLabels.CONTAINER],
        )

    # ========================================================================
    # Helper Methods
    # ========================================================================

    def record_parse(self, outcome: str) -> None:
        """Record the outcome of one parse attempt."""
        if self.enabled:
            self.records_parsed_total.labels(outcome=outcome).inc()

    def record_malformed_field(self, container: str, field: str) -> None:
        """Record a field-level recovery."""
        if self.enabled:
            self.malformed_fields_total.labels(container=container, field=field).inc()

    def record_dropped_entry(self, container: str) -> None:
        """Record an entry dropped from a container."""
        if self.enabled:
            self.entries_dropped_total.labels(container=container).inc()


# Global metrics instance
metrics = PurchaserInfoMetrics(enabled=settings.metrics_enabled)
