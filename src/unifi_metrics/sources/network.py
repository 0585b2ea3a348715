"""UniFi Network integration API client (device inventory and statistics)."""

from typing import TypeVar

import httpx
from pydantic import TypeAdapter

from unifi_metrics.sources.models import Device, DeviceStatistics, Page, Site
from unifi_metrics.sources.transport import UnifiTransport
from unifi_metrics.sources.types import SourceError, Topology
from unifi_metrics.telemetry import SITE_DEVICES_FETCH_FAILED, get_logger

log = get_logger(__name__)

T = TypeVar("T")

SOURCE_NAME = "network"
SITES_PAGE_SIZE = 25
DEVICES_PAGE_SIZE = 200

_SITES_PAGE = TypeAdapter(Page[Site])
_DEVICES_PAGE = TypeAdapter(Page[Device])
_DEVICE_STATISTICS = TypeAdapter(DeviceStatistics)


class NetworkClient:
    """Client for the UniFi Network integration API.

    Usage:
        async with NetworkClient(base_url, api_token) as client:
            topology = await client.fetch_topology()
            stats = await client.fetch_device_stats(site_id, device_id)
    """

    def __init__(
        self,
        base_url: str,
        api_token: str,
        timeout_seconds: float = 5.0,
        verify_tls: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._transport = UnifiTransport(
            source=SOURCE_NAME,
            base_url=base_url,
            api_token=api_token,
            timeout_seconds=timeout_seconds,
            verify_tls=verify_tls,
            transport=transport,
        )

    async def __aenter__(self) -> "NetworkClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def fetch_topology(self) -> Topology:
        """Discover all sites and their devices.

        A failure listing the devices of one site is logged and that site is
        returned without devices; a failure listing sites is raised.

        Raises:
            SourceError: If the site list cannot be fetched.
        """
        sites = await self._fetch_all("/sites", _SITES_PAGE, SITES_PAGE_SIZE)
        log.info("sites_discovered", site_count=len(sites))

        topology = Topology(sites=sites)
        for site in sites:
            try:
                devices = await self._fetch_all(
                    f"/sites/{site.id}/devices", _DEVICES_PAGE, DEVICES_PAGE_SIZE
                )
            except SourceError as e:
                log.warning(
                    SITE_DEVICES_FETCH_FAILED,
                    site_id=site.id,
                    site_name=site.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            log.info(
                "site_devices_discovered",
                site_id=site.id,
                site_name=site.name,
                device_count=len(devices),
            )
            topology.devices[site.id] = devices

        return topology

    async def fetch_device_stats(self, site_id: str, device_id: str) -> DeviceStatistics:
        """Fetch the latest statistics for one device.

        Raises:
            SourceError: If the request fails.
        """
        return await self._transport.get(
            f"/sites/{site_id}/devices/{device_id}/statistics/latest", _DEVICE_STATISTICS
        )

    async def _fetch_all(
        self, path: str, adapter: TypeAdapter[Page[T]], page_size: int
    ) -> list[T]:
        """Follow offset/limit pagination until totalCount items were read."""
        items: list[T] = []
        offset = 0
        while True:
            page = await self._transport.get(
                path, adapter, params={"offset": offset, "limit": page_size}
            )
            items.extend(page.data)
            offset += len(page.data)
            if not page.data or page.total_count is None or offset >= page.total_count:
                return items
