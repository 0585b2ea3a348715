"""Single poll cycles and topology initialization.

Each function performs one pass over one source and writes into the
topology cache and metrics store. Failures are logged and recorded in the
poll-outcome record; they are never raised to the caller.
"""

import time

from unifi_metrics.metrics.records import (
    NETWORK_POLL,
    PROTECT_POLL,
    UNKNOWN_LABEL,
    DeviceMetricRecord,
    SensorMetricRecord,
)
from unifi_metrics.metrics.store import MetricsStore
from unifi_metrics.sources.models import DeviceStatistics, Sensor
from unifi_metrics.sources.types import DeviceSource, SensorSource, SourceError
from unifi_metrics.telemetry import (
    DEVICE_STATS_FETCH_FAILED,
    POLL_CYCLE_COMPLETED,
    POLL_CYCLE_STARTED,
    SENSORS_FETCH_FAILED,
    TOPOLOGY_INIT_FAILED,
    TOPOLOGY_INITIALIZED,
    get_logger,
)
from unifi_metrics.topology.cache import CachedDevice, CachedSite, TopologyCache

log = get_logger(__name__)


def _flag(value: bool | None) -> int | None:
    if value is None:
        return None
    return 1 if value else 0


def build_device_record(
    site: CachedSite, device: CachedDevice, stats: DeviceStatistics
) -> DeviceMetricRecord:
    """Combine cached identity with freshly fetched statistics."""
    return DeviceMetricRecord(
        site_id=site.id,
        site_name=site.name,
        device_id=device.id,
        device_name=device.name,
        device_model=device.model,
        ip_address=device.ip_address or UNKNOWN_LABEL,
        cpu_usage=stats.cpu_utilization_pct,
        memory_usage=stats.memory_utilization_pct,
        uplink_tx_rate=stats.uplink_tx_rate,
        uplink_rx_rate=stats.uplink_rx_rate,
        state=1 if device.is_online else 0,
    )


def build_sensor_record(sensor: Sensor) -> SensorMetricRecord:
    """Flatten a sensor payload; readings missing upstream stay None."""
    return SensorMetricRecord(
        sensor_id=sensor.id,
        sensor_name=sensor.name,
        mount_type=sensor.mount_type or UNKNOWN_LABEL,
        temperature=sensor.temperature,
        humidity=sensor.humidity,
        light=sensor.light,
        battery=sensor.battery_percentage,
        state=1 if sensor.state.upper() == "CONNECTED" else 0,
        motion_detected=_flag(sensor.is_motion_detected),
        is_opened=_flag(sensor.is_opened),
    )


async def initialize_topology(source: DeviceSource, cache: TopologyCache) -> bool:
    """Populate the topology cache once at startup.

    On failure the cache is left as it was (empty at startup) and the
    process carries on; later device polls then find nothing to poll.

    Returns:
        True if the topology was fetched.
    """
    try:
        topology = await source.fetch_topology()
    except SourceError as e:
        log.error(TOPOLOGY_INIT_FAILED, error=str(e), error_type=type(e).__name__)
        return False

    cache.merge_sites(topology.sites)
    for site_id, devices in topology.devices.items():
        cache.merge_devices(site_id, devices)

    log.info(
        TOPOLOGY_INITIALIZED,
        site_count=len(cache),
        device_count=cache.device_count(),
    )
    return True


def _record_outcome(
    store: MetricsStore, source: str, success: bool, start: float, **counts: int
) -> None:
    duration = time.perf_counter() - start
    store.update_poll(source, success, duration)
    log.info(
        POLL_CYCLE_COMPLETED,
        source=source,
        success=success,
        duration_s=round(duration, 3),
        **counts,
    )


async def poll_devices(source: DeviceSource, cache: TopologyCache, store: MetricsStore) -> bool:
    """Run one device statistics cycle.

    Every cached device is polled. A failed device keeps its previous record;
    the cycle is successful only when no device failed. The poll-outcome
    record is written after all devices were handled, and also as a failure
    when the cycle is aborted by an unexpected error.

    Returns:
        True if every device fetch succeeded.
    """
    start = time.perf_counter()
    success = True
    updated = 0

    sites = cache.snapshot()
    log.debug(POLL_CYCLE_STARTED, source=NETWORK_POLL, site_count=len(sites))

    try:
        for site in sites:
            for device in site.devices.values():
                try:
                    stats = await source.fetch_device_stats(site.id, device.id)
                except SourceError as e:
                    log.warning(
                        DEVICE_STATS_FETCH_FAILED,
                        site_id=site.id,
                        site_name=site.name,
                        device_id=device.id,
                        device_name=device.name,
                        error=str(e),
                    )
                    success = False
                    continue

                store.update_device(build_device_record(site, device, stats))
                updated += 1
    except Exception:
        _record_outcome(store, NETWORK_POLL, False, start, devices_updated=updated)
        raise

    _record_outcome(store, NETWORK_POLL, success, start, devices_updated=updated)
    return success


async def poll_sensors(source: SensorSource, store: MetricsStore) -> bool:
    """Run one sensor cycle.

    A failed sensor listing leaves every sensor record untouched and marks
    the cycle failed.

    Returns:
        True if the sensor list was fetched.
    """
    start = time.perf_counter()
    updated = 0
    log.debug(POLL_CYCLE_STARTED, source=PROTECT_POLL)

    try:
        try:
            sensors = await source.fetch_sensors()
        except SourceError as e:
            log.error(SENSORS_FETCH_FAILED, error=str(e), error_type=type(e).__name__)
            sensors = None

        if sensors is not None:
            for sensor in sensors:
                log.debug("sensor_updated", sensor_id=sensor.id, sensor_name=sensor.name)
                store.update_sensor(build_sensor_record(sensor))
                updated += 1
    except Exception:
        _record_outcome(store, PROTECT_POLL, False, start, sensors_updated=updated)
        raise

    success = sensors is not None
    _record_outcome(store, PROTECT_POLL, success, start, sensors_updated=updated)
    return success
