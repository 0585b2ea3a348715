"""Polling pipeline: topology initialization, poll cycles and scheduling."""

from unifi_metrics.poller.cycles import (
    build_device_record,
    build_sensor_record,
    initialize_topology,
    poll_devices,
    poll_sensors,
)
from unifi_metrics.poller.scheduler import PollScheduler

__all__ = [
    "PollScheduler",
    "initialize_topology",
    "poll_devices",
    "poll_sensors",
    "build_device_record",
    "build_sensor_record",
]
