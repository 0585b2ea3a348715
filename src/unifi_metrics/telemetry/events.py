"""Semantic event constants for structured logging.

All log events should use these constants rather than magic strings so the
JSON log stream stays queryable.
"""

# Service lifecycle
SERVICE_STARTING = "service_starting"
SERVICE_READY = "service_ready"
SERVICE_STOPPED = "service_stopped"

# Topology
TOPOLOGY_INITIALIZED = "topology_initialized"
TOPOLOGY_INIT_FAILED = "topology_init_failed"
SITE_DEVICES_FETCH_FAILED = "site_devices_fetch_failed"

# Poll cycles
POLL_CYCLE_STARTED = "poll_cycle_started"
POLL_CYCLE_COMPLETED = "poll_cycle_completed"
POLL_LOOP_ERROR = "poll_loop_error"
DEVICE_STATS_FETCH_FAILED = "device_stats_fetch_failed"
SENSORS_FETCH_FAILED = "sensors_fetch_failed"

# Source clients
SOURCE_REQUEST = "source_request"
SOURCE_REQUEST_FAILED = "source_request_failed"

# HTTP front door
METRICS_RENDERED = "metrics_rendered"
METRICS_REQUEST_UNAUTHORIZED = "metrics_request_unauthorized"
