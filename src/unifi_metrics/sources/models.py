"""Pydantic models for UniFi integration API payloads.

Only the fields the exporter reads are modelled; everything else in the
upstream payloads is ignored. Statistic fields are optional throughout:
an absent field means "not reported", never zero.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class UpstreamModel(BaseModel):
    """Base for upstream payloads: camelCase on the wire, unknown fields ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),  # Allow model_key
    )


class ApiErrorCause(UpstreamModel):
    error: str
    name: str


class ApiErrorBody(UpstreamModel):
    """Structured error envelope returned by the integration APIs."""

    error: str
    name: str
    cause: ApiErrorCause | None = None


class Page(UpstreamModel, Generic[T]):
    """Paginated list envelope (offset/limit/count/totalCount/data)."""

    offset: int | None = None
    limit: int | None = None
    count: int | None = None
    total_count: int | None = None
    data: list[T] = Field(default_factory=list)


# ============================================================================
# Network API
# ============================================================================


class Site(UpstreamModel):
    id: str
    name: str
    internal_reference: str | None = None


class Device(UpstreamModel):
    id: str
    name: str
    model: str
    state: str
    mac_address: str | None = None
    ip_address: str | None = None
    features: list[str] | None = None


class UplinkStats(UpstreamModel):
    tx_rate_bps: float | None = None
    rx_rate_bps: float | None = None


class DeviceStatistics(UpstreamModel):
    """Latest statistics for one device (`/statistics/latest`)."""

    uptime_sec: int | None = None
    last_heartbeat_at: str | None = None
    load_average_1min: float | None = Field(default=None, alias="loadAverage1Min")
    load_average_5min: float | None = Field(default=None, alias="loadAverage5Min")
    load_average_15min: float | None = Field(default=None, alias="loadAverage15Min")
    cpu_utilization_pct: float | None = None
    memory_utilization_pct: float | None = None
    uplink: UplinkStats | None = None

    @property
    def uplink_tx_rate(self) -> float | None:
        return self.uplink.tx_rate_bps if self.uplink else None

    @property
    def uplink_rx_rate(self) -> float | None:
        return self.uplink.rx_rate_bps if self.uplink else None


# ============================================================================
# Protect API
# ============================================================================


class SensorValue(UpstreamModel):
    """A reading wrapped with its status, e.g. {"value": 21.5, "status": "neutral"}."""

    value: float | None = None
    status: str | None = None


class SensorStats(UpstreamModel):
    light: SensorValue | None = None
    humidity: SensorValue | None = None
    temperature: SensorValue | None = None


class BatteryStatus(UpstreamModel):
    percentage: float | None = None
    is_low: bool | None = None


class Sensor(UpstreamModel):
    id: str
    name: str
    state: str
    model_key: str | None = None
    mount_type: str | None = None
    battery_status: BatteryStatus | None = None
    stats: SensorStats | None = None
    is_opened: bool | None = None
    is_motion_detected: bool | None = None

    @property
    def temperature(self) -> float | None:
        return _reading(self.stats.temperature if self.stats else None)

    @property
    def humidity(self) -> float | None:
        return _reading(self.stats.humidity if self.stats else None)

    @property
    def light(self) -> float | None:
        return _reading(self.stats.light if self.stats else None)

    @property
    def battery_percentage(self) -> float | None:
        return self.battery_status.percentage if self.battery_status else None


def _reading(wrapper: SensorValue | None) -> float | None:
    return wrapper.value if wrapper is not None else None
