"""Latest-value records held by the metrics store.

Records are frozen: an update always replaces the whole record, so a reader
never sees a mix of old and new fields. Optional fields hold None when the
source did not report a value; None is never rendered as zero.
"""

from dataclasses import dataclass

NETWORK_POLL = "network"
PROTECT_POLL = "protect"

UNKNOWN_LABEL = "unknown"


@dataclass(frozen=True)
class DeviceMetricRecord:
    """Latest statistics for one network device, with identity for labels.

    Usage values are percentages (0-100) as reported upstream; rates are bits/s.
    """

    site_id: str
    site_name: str
    device_id: str
    device_name: str
    device_model: str
    ip_address: str
    cpu_usage: float | None
    memory_usage: float | None
    uplink_tx_rate: float | None
    uplink_rx_rate: float | None
    state: int

    @property
    def key(self) -> tuple[str, str]:
        return (self.site_id, self.device_id)


@dataclass(frozen=True)
class SensorMetricRecord:
    """Latest readings for one protect sensor.

    Humidity and battery are percentages (0-100); temperature is Celsius.
    """

    sensor_id: str
    sensor_name: str
    mount_type: str
    temperature: float | None
    humidity: float | None
    light: float | None
    battery: float | None
    state: int
    motion_detected: int | None
    is_opened: int | None


@dataclass(frozen=True)
class PollOutcomeRecord:
    """Outcome of the most recent poll cycle for one source."""

    success: int
    duration: float
