"""UniFi Protect integration API client (sensors)."""

import httpx
from pydantic import TypeAdapter

from unifi_metrics.sources.models import Sensor
from unifi_metrics.sources.transport import UnifiTransport
from unifi_metrics.telemetry import get_logger

log = get_logger(__name__)

SOURCE_NAME = "protect"

# Envelope names Protect answers with when the API key is rejected.
AUTH_ERROR_NAMES = frozenset({"API_ERROR", "UNKNOWN_ERROR"})

_SENSORS = TypeAdapter(list[Sensor])


class ProtectClient:
    """Client for the UniFi Protect integration API."""

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
            auth_error_names=AUTH_ERROR_NAMES,
            transport=transport,
        )

    async def __aenter__(self) -> "ProtectClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def fetch_sensors(self) -> list[Sensor]:
        """Fetch every sensor with its latest readings.

        Raises:
            SourceError: If the request fails.
        """
        sensors = await self._transport.get("/sensors", _SENSORS)
        log.debug("sensors_fetched", sensor_count=len(sensors))
        return sensors
