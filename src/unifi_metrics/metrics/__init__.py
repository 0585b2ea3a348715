"""Metrics store and OpenMetrics exposition."""

from unifi_metrics.metrics.exposition import OPENMETRICS_CONTENT_TYPE, render
from unifi_metrics.metrics.records import (
    NETWORK_POLL,
    PROTECT_POLL,
    DeviceMetricRecord,
    PollOutcomeRecord,
    SensorMetricRecord,
)
from unifi_metrics.metrics.store import MetricsStore, RecordMap

__all__ = [
    "MetricsStore",
    "RecordMap",
    "DeviceMetricRecord",
    "SensorMetricRecord",
    "PollOutcomeRecord",
    "NETWORK_POLL",
    "PROTECT_POLL",
    "OPENMETRICS_CONTENT_TYPE",
    "render",
]
