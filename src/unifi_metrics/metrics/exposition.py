"""OpenMetrics text rendering of the metrics store.

`render()` builds the whole exposition from a fresh store snapshot on every
call. Every family is a gauge. A family is emitted only when at least one
record carries a value for it; families without samples are left out
together with their HELP/TYPE/UNIT lines. The stream always ends with
`# EOF`.
"""

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from unifi_metrics.metrics.records import DeviceMetricRecord, SensorMetricRecord
from unifi_metrics.metrics.store import MetricsStore

OPENMETRICS_CONTENT_TYPE = "application/openmetrics-text; version=1.0.0; charset=utf-8"
EOF_MARKER = "# EOF"

Labels = tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class MetricFamily:
    """Static description of one gauge family and how to read it from a record."""

    name: str
    help: str
    value: Callable[[Any], float | int | None]
    unit: str | None = None
    percent: bool = False

    def sample_value(self, record: Any) -> float | int | None:
        value = self.value(record)
        if value is None:
            return None
        if self.percent:
            return value / 100.0
        return value


DEVICE_FAMILIES: tuple[MetricFamily, ...] = (
    MetricFamily(
        name="unifi_device_cpu_usage_ratio",
        help="CPU usage of devices as a normalized ratio between 0.0 and 1.0.",
        value=lambda r: r.cpu_usage,
        unit="ratio",
        percent=True,
    ),
    MetricFamily(
        name="unifi_device_memory_usage_ratio",
        help="Memory usage of devices as a normalized ratio between 0.0 and 1.0.",
        value=lambda r: r.memory_usage,
        unit="ratio",
        percent=True,
    ),
    MetricFamily(
        name="unifi_device_upload_speed_bits_per_second",
        help="Upload speed in bits/sec",
        value=lambda r: r.uplink_tx_rate,
        unit="bits_per_second",
    ),
    MetricFamily(
        name="unifi_device_download_speed_bits_per_second",
        help="Download speed in bits/sec",
        value=lambda r: r.uplink_rx_rate,
        unit="bits_per_second",
    ),
    MetricFamily(
        name="unifi_device_state",
        help="Device state (1 = online, 0 = offline)",
        value=lambda r: r.state,
    ),
)

SENSOR_FAMILIES: tuple[MetricFamily, ...] = (
    MetricFamily(
        name="unifi_sensor_temperature_celsius",
        help="Temperature reading from sensor in Celsius",
        value=lambda r: r.temperature,
        unit="celsius",
    ),
    MetricFamily(
        name="unifi_sensor_humidity_ratio",
        help=(
            "Current relative humidity measured by the sensor as a normalized "
            "ratio between 0.0 and 1.0."
        ),
        value=lambda r: r.humidity,
        unit="ratio",
        percent=True,
    ),
    MetricFamily(
        name="unifi_sensor_light_candela_per_square_meter",
        help="Current light level measured by the sensor in candela per square meter.",
        value=lambda r: r.light,
        unit="candela_per_square_meter",
    ),
    MetricFamily(
        name="unifi_sensor_battery_ratio",
        help="Battery level of the sensor as a normalized ratio between 0.0 and 1.0.",
        value=lambda r: r.battery,
        unit="ratio",
        percent=True,
    ),
    MetricFamily(
        name="unifi_sensor_state",
        help="Sensor connection state (1 = connected, 0 = disconnected)",
        value=lambda r: r.state,
    ),
    MetricFamily(
        name="unifi_sensor_motion_detected",
        help="Motion detection status (1 = detected, 0 = not detected)",
        value=lambda r: r.motion_detected,
    ),
    MetricFamily(
        name="unifi_sensor_opened",
        help="Door/window sensor status (1 = opened, 0 = closed)",
        value=lambda r: r.is_opened,
    ),
)

POLL_FAMILIES: tuple[MetricFamily, ...] = (
    MetricFamily(
        name="unifi_poll_success",
        help="Whether the last poll was successful (1 = success, 0 = failure)",
        value=lambda r: r.success,
    ),
    MetricFamily(
        name="unifi_poll_duration_seconds",
        help="Duration of the last poll in seconds",
        value=lambda r: r.duration,
        unit="seconds",
    ),
)


def escape_label_value(value: str) -> str:
    """Escape a label value for the text format (backslash, quote, newline)."""
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def format_value(value: float | int) -> str:
    """Format a sample value.

    Integral values drop the decimal point (1, 0, 50); other finite values
    use the shortest round-trip repr (0.5, 0.573).
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_labels(labels: Labels) -> str:
    return ",".join(f'{name}="{escape_label_value(value)}"' for name, value in labels)


def device_labels(record: DeviceMetricRecord) -> Labels:
    return (
        ("site_id", record.site_id),
        ("site_name", record.site_name),
        ("device_id", record.device_id),
        ("device_name", record.device_name),
        ("device_model", record.device_model),
        ("ip_address", record.ip_address),
    )


def sensor_labels(record: SensorMetricRecord) -> Labels:
    return (
        ("sensor_id", record.sensor_id),
        ("sensor_name", record.sensor_name),
        ("mount_type", record.mount_type),
    )


def _render_families(
    lines: list[str],
    families: Sequence[MetricFamily],
    entries: Iterable[tuple[Labels, Any]],
) -> None:
    entries = list(entries)
    for family in families:
        samples = []
        for labels, record in entries:
            value = family.sample_value(record)
            if value is None:
                continue
            samples.append(f"{family.name}{{{format_labels(labels)}}} {format_value(value)}")
        if not samples:
            continue

        lines.append(f"# HELP {family.name} {family.help}")
        lines.append(f"# TYPE {family.name} gauge")
        if family.unit:
            lines.append(f"# UNIT {family.name} {family.unit}")
        lines.extend(samples)


def render(store: MetricsStore) -> str:
    """Render the current store contents as OpenMetrics text.

    Args:
        store: Metrics store to snapshot.

    Returns:
        Exposition text terminated by "# EOF" and a newline.
    """
    lines: list[str] = []

    devices = store.devices.snapshot_all()
    _render_families(
        lines, DEVICE_FAMILIES, ((device_labels(r), r) for r in devices.values())
    )

    sensors = store.sensors.snapshot_all()
    _render_families(
        lines, SENSOR_FAMILIES, ((sensor_labels(r), r) for r in sensors.values())
    )

    polls = store.polls.snapshot_all()
    _render_families(
        lines, POLL_FAMILIES, (((("type", source),), r) for source, r in polls.items())
    )

    lines.append(EOF_MARKER)
    return "\n".join(lines) + "\n"
