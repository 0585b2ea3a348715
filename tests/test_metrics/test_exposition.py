"""Tests for OpenMetrics rendering."""

import math

import pytest

from unifi_metrics.metrics.exposition import (
    DEVICE_FAMILIES,
    EOF_MARKER,
    POLL_FAMILIES,
    SENSOR_FAMILIES,
    escape_label_value,
    format_value,
    render,
)
from unifi_metrics.metrics.records import (
    NETWORK_POLL,
    PROTECT_POLL,
    DeviceMetricRecord,
    SensorMetricRecord,
)
from unifi_metrics.metrics.store import MetricsStore

DEVICE_LABELS = (
    'site_id="S1",site_name="Home",device_id="D1",device_name="Gateway",'
    'device_model="UDM-Pro",ip_address="10.0.0.1"'
)


def device_record(**overrides) -> DeviceMetricRecord:
    fields = dict(
        site_id="S1",
        site_name="Home",
        device_id="D1",
        device_name="Gateway",
        device_model="UDM-Pro",
        ip_address="10.0.0.1",
        cpu_usage=None,
        memory_usage=None,
        uplink_tx_rate=None,
        uplink_rx_rate=None,
        state=1,
    )
    fields.update(overrides)
    return DeviceMetricRecord(**fields)


def sensor_record(**overrides) -> SensorMetricRecord:
    fields = dict(
        sensor_id="SN1",
        sensor_name="Front Door",
        mount_type="door",
        temperature=None,
        humidity=None,
        light=None,
        battery=None,
        state=1,
        motion_detected=None,
        is_opened=None,
    )
    fields.update(overrides)
    return SensorMetricRecord(**fields)


def family_names(text: str) -> list[str]:
    return [line.split()[2] for line in text.splitlines() if line.startswith("# TYPE")]


class TestFormatValue:
    """Test sample value formatting."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (1, "1"),
            (0, "0"),
            (1.0, "1"),
            (0.5, "0.5"),
            (0.25, "0.25"),
            (1000000.0, "1000000"),
            (21.5, "21.5"),
            (True, "1"),
            (False, "0"),
        ],
    )
    def test_finite_values(self, value, expected: str) -> None:
        assert format_value(value) == expected

    def test_special_values(self) -> None:
        assert format_value(math.nan) == "NaN"
        assert format_value(math.inf) == "+Inf"
        assert format_value(-math.inf) == "-Inf"


class TestEscapeLabelValue:
    """Test label value escaping."""

    def test_plain_value_unchanged(self) -> None:
        assert escape_label_value("Living Room") == "Living Room"

    def test_special_characters_escaped(self) -> None:
        assert escape_label_value('a"b') == 'a\\"b'
        assert escape_label_value("a\\b") == "a\\\\b"
        assert escape_label_value("a\nb") == "a\\nb"


class TestFamilyTables:
    """Test the static family descriptions."""

    def test_family_counts(self) -> None:
        assert len(DEVICE_FAMILIES) == 5
        assert len(SENSOR_FAMILIES) == 7
        assert len(POLL_FAMILIES) == 2

    def test_unit_matches_name_suffix(self) -> None:
        """A declared unit is always the suffix of the family name."""
        for family in DEVICE_FAMILIES + SENSOR_FAMILIES + POLL_FAMILIES:
            if family.unit:
                assert family.name.endswith(f"_{family.unit}")


class TestRender:
    """Test full exposition rendering."""

    def test_empty_store_renders_only_eof(self, store: MetricsStore) -> None:
        assert render(store) == "# EOF\n"

    def test_online_device_with_cpu_only(self, store: MetricsStore) -> None:
        """CPU is normalized and families without values are omitted."""
        store.update_device(device_record(cpu_usage=50.0))

        text = render(store)

        assert text == (
            "# HELP unifi_device_cpu_usage_ratio "
            "CPU usage of devices as a normalized ratio between 0.0 and 1.0.\n"
            "# TYPE unifi_device_cpu_usage_ratio gauge\n"
            "# UNIT unifi_device_cpu_usage_ratio ratio\n"
            f"unifi_device_cpu_usage_ratio{{{DEVICE_LABELS}}} 0.5\n"
            "# HELP unifi_device_state Device state (1 = online, 0 = offline)\n"
            "# TYPE unifi_device_state gauge\n"
            f"unifi_device_state{{{DEVICE_LABELS}}} 1\n"
            "# EOF\n"
        )
        assert "memory" not in text
        assert "speed" not in text

    def test_rates_are_not_normalized(self, store: MetricsStore) -> None:
        store.update_device(device_record(uplink_tx_rate=1000000.0, uplink_rx_rate=2500.5))

        text = render(store)

        assert f"unifi_device_upload_speed_bits_per_second{{{DEVICE_LABELS}}} 1000000" in text
        assert f"unifi_device_download_speed_bits_per_second{{{DEVICE_LABELS}}} 2500.5" in text

    def test_offline_device_state_zero(self, store: MetricsStore) -> None:
        store.update_device(device_record(state=0))

        assert f"unifi_device_state{{{DEVICE_LABELS}}} 0\n" in render(store)

    def test_unknown_ip_label(self, store: MetricsStore) -> None:
        store.update_device(device_record(ip_address="unknown"))

        assert 'ip_address="unknown"' in render(store)

    def test_label_values_are_escaped(self, store: MetricsStore) -> None:
        store.update_device(device_record(device_name='Lab "AP"'))

        assert 'device_name="Lab \\"AP\\""' in render(store)

    def test_sensor_families(self, store: MetricsStore) -> None:
        store.update_sensor(
            sensor_record(
                temperature=21.5,
                humidity=50.0,
                light=12.0,
                battery=25.0,
                motion_detected=0,
                is_opened=1,
            )
        )

        text = render(store)
        labels = 'sensor_id="SN1",sensor_name="Front Door",mount_type="door"'

        assert f"unifi_sensor_temperature_celsius{{{labels}}} 21.5" in text
        assert f"unifi_sensor_humidity_ratio{{{labels}}} 0.5" in text
        assert f"unifi_sensor_light_candela_per_square_meter{{{labels}}} 12" in text
        assert f"unifi_sensor_battery_ratio{{{labels}}} 0.25" in text
        assert f"unifi_sensor_state{{{labels}}} 1" in text
        assert f"unifi_sensor_motion_detected{{{labels}}} 0" in text
        assert f"unifi_sensor_opened{{{labels}}} 1" in text
        assert "# UNIT unifi_sensor_temperature_celsius celsius" in text

    def test_sensor_without_readings_only_reports_state(self, store: MetricsStore) -> None:
        store.update_sensor(sensor_record(state=0))

        assert family_names(render(store)) == ["unifi_sensor_state"]

    def test_poll_families_use_type_label(self, store: MetricsStore) -> None:
        store.update_poll(NETWORK_POLL, True, 0.5)
        store.update_poll(PROTECT_POLL, False, 2.0)

        text = render(store)

        assert 'unifi_poll_success{type="network"} 1' in text
        assert 'unifi_poll_success{type="protect"} 0' in text
        assert 'unifi_poll_duration_seconds{type="network"} 0.5' in text
        assert 'unifi_poll_duration_seconds{type="protect"} 2' in text

    def test_family_order_and_eof(self, store: MetricsStore) -> None:
        """Device families come first, then sensors, then polls, then EOF."""
        store.update_poll(NETWORK_POLL, True, 0.5)
        store.update_sensor(sensor_record(temperature=20.0))
        store.update_device(device_record(cpu_usage=10.0))

        text = render(store)

        assert family_names(text) == [
            "unifi_device_cpu_usage_ratio",
            "unifi_device_state",
            "unifi_sensor_temperature_celsius",
            "unifi_sensor_state",
            "unifi_poll_success",
            "unifi_poll_duration_seconds",
        ]
        assert text.endswith(f"{EOF_MARKER}\n")
        assert text.count(EOF_MARKER) == 1

    def test_each_family_has_one_help_and_type(self, store: MetricsStore) -> None:
        """Samples from several devices are grouped under one header."""
        store.update_device(device_record(device_id="D1", cpu_usage=10.0))
        store.update_device(device_record(device_id="D2", cpu_usage=20.0))

        text = render(store)

        assert text.count("# HELP unifi_device_cpu_usage_ratio") == 1
        assert text.count("# TYPE unifi_device_state") == 1
        assert text.count("unifi_device_cpu_usage_ratio{") == 2

    def test_render_reflects_latest_update(self, store: MetricsStore) -> None:
        store.update_device(device_record(cpu_usage=50.0))
        first = render(store)
        store.update_device(device_record(cpu_usage=25.0))
        second = render(store)

        assert "} 0.5\n" in first
        assert "} 0.25\n" in second
        assert "} 0.5\n" not in second
