"""Telemetry module for structured logging.

This module provides:
- Structured logging via structlog
- Semantic event constants
"""

from unifi_metrics.telemetry.events import (
    DEVICE_STATS_FETCH_FAILED,
    METRICS_RENDERED,
    METRICS_REQUEST_UNAUTHORIZED,
    POLL_CYCLE_COMPLETED,
    POLL_CYCLE_STARTED,
    POLL_LOOP_ERROR,
    SENSORS_FETCH_FAILED,
    SERVICE_READY,
    SERVICE_STARTING,
    SERVICE_STOPPED,
    SITE_DEVICES_FETCH_FAILED,
    SOURCE_REQUEST,
    SOURCE_REQUEST_FAILED,
    TOPOLOGY_INIT_FAILED,
    TOPOLOGY_INITIALIZED,
)
from unifi_metrics.telemetry.logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    # Event constants
    "SERVICE_STARTING",
    "SERVICE_READY",
    "SERVICE_STOPPED",
    "TOPOLOGY_INITIALIZED",
    "TOPOLOGY_INIT_FAILED",
    "SITE_DEVICES_FETCH_FAILED",
    "POLL_CYCLE_STARTED",
    "POLL_CYCLE_COMPLETED",
    "POLL_LOOP_ERROR",
    "DEVICE_STATS_FETCH_FAILED",
    "SENSORS_FETCH_FAILED",
    "SOURCE_REQUEST",
    "SOURCE_REQUEST_FAILED",
    "METRICS_RENDERED",
    "METRICS_REQUEST_UNAUTHORIZED",
]
