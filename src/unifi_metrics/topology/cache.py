"""In-memory cache of discovered sites and their devices.

The cache only ever grows: sites are inserted once and kept, devices are
inserted or overwritten by id and never removed. Readers work from
`snapshot()`, an immutable copy that can be iterated while slow network
calls are in flight without holding the lock.
"""

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from unifi_metrics.sources.models import Device, Site


@dataclass(frozen=True)
class CachedDevice:
    """Device identity and connectivity as last reported by the inventory."""

    id: str
    name: str
    model: str
    ip_address: str | None
    state: str

    @property
    def is_online(self) -> bool:
        return self.state.upper() == "ONLINE"


@dataclass(frozen=True)
class CachedSite:
    """A site with a read-only view of its devices keyed by device id."""

    id: str
    name: str
    devices: Mapping[str, CachedDevice] = field(
        default_factory=lambda: MappingProxyType({})
    )


class TopologyCache:
    """Thread-safe, merge-only site/device inventory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # site id -> (site name, device id -> device)
        self._sites: dict[str, tuple[str, dict[str, CachedDevice]]] = {}

    def merge_sites(self, sites: Iterable[Site]) -> None:
        """Insert sites whose id has not been seen; existing entries are untouched."""
        with self._lock:
            for site in sites:
                if site.id not in self._sites:
                    self._sites[site.id] = (site.name, {})

    def merge_devices(self, site_id: str, devices: Iterable[Device]) -> None:
        """Insert or overwrite devices of a known site. Unknown sites are ignored."""
        with self._lock:
            entry = self._sites.get(site_id)
            if entry is None:
                return
            site_devices = entry[1]
            for device in devices:
                site_devices[device.id] = CachedDevice(
                    id=device.id,
                    name=device.name,
                    model=device.model,
                    ip_address=device.ip_address,
                    state=device.state,
                )

    def snapshot(self) -> tuple[CachedSite, ...]:
        """Return an immutable copy of all sites and their devices."""
        with self._lock:
            return tuple(
                CachedSite(id=site_id, name=name, devices=MappingProxyType(dict(devices)))
                for site_id, (name, devices) in self._sites.items()
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._sites)

    def device_count(self) -> int:
        """Total number of cached devices across all sites."""
        with self._lock:
            return sum(len(devices) for _, devices in self._sites.values())
