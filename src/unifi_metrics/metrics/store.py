"""Concurrent latest-value metrics store.

Three independent keyed maps (devices, sensors, poll outcomes), each behind
its own lock. There is no ordering or transaction across maps: a scrape may
observe a poll cycle half-applied, which is acceptable for a snapshot
exporter.
"""

import threading
from collections.abc import Hashable, Mapping
from types import MappingProxyType
from typing import Generic, TypeVar

from unifi_metrics.metrics.records import (
    DeviceMetricRecord,
    PollOutcomeRecord,
    SensorMetricRecord,
)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class RecordMap(Generic[K, V]):
    """A lock-guarded map with whole-value replacement.

    Entries live for the lifetime of the process; there is no eviction.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[K, V] = {}

    def upsert(self, key: K, record: V) -> None:
        """Replace the record at key (last writer wins)."""
        with self._lock:
            self._records[key] = record

    def get(self, key: K) -> V | None:
        with self._lock:
            return self._records.get(key)

    def snapshot_all(self) -> Mapping[K, V]:
        """Return a read-only copy of the whole map in insertion order."""
        with self._lock:
            return MappingProxyType(dict(self._records))

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class MetricsStore:
    """Latest device, sensor and poll-outcome records.

    Constructed once at startup and shared by the poller (writer) and the
    HTTP front door (reader).
    """

    def __init__(self) -> None:
        self.devices: RecordMap[tuple[str, str], DeviceMetricRecord] = RecordMap()
        self.sensors: RecordMap[str, SensorMetricRecord] = RecordMap()
        self.polls: RecordMap[str, PollOutcomeRecord] = RecordMap()

    def update_device(self, record: DeviceMetricRecord) -> None:
        self.devices.upsert(record.key, record)

    def update_sensor(self, record: SensorMetricRecord) -> None:
        self.sensors.upsert(record.sensor_id, record)

    def update_poll(self, source: str, success: bool, duration: float) -> None:
        """Record the outcome of a poll cycle for a source tag ("network", "protect")."""
        self.polls.upsert(source, PollOutcomeRecord(success=1 if success else 0, duration=duration))
