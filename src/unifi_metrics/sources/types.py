"""Type definitions for the source clients.

This module defines:
- Topology: result of the one-off inventory discovery
- DeviceSource / SensorSource: protocols the poller depends on
- Error classes: hierarchy of source client errors
"""

from dataclasses import dataclass, field
from typing import Protocol

from unifi_metrics.sources.models import ApiErrorBody, Device, DeviceStatistics, Sensor, Site


@dataclass
class Topology:
    """Sites and, for each site that could be listed, its devices."""

    sites: list[Site] = field(default_factory=list)
    devices: dict[str, list[Device]] = field(default_factory=dict)


class DeviceSource(Protocol):
    """Device inventory and statistics source (UniFi Network)."""

    async def fetch_topology(self) -> Topology: ...

    async def fetch_device_stats(self, site_id: str, device_id: str) -> DeviceStatistics: ...


class SensorSource(Protocol):
    """Sensor source (UniFi Protect)."""

    async def fetch_sensors(self) -> list[Sensor]: ...


# Error hierarchy


class SourceError(Exception):
    """Base exception for all source client errors."""

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.source = source


class SourceTransportError(SourceError):
    """Raised when the request never produced an HTTP response.

    `kind` is "timeout", "connect" or "request".
    """

    def __init__(self, message: str, *, source: str, kind: str) -> None:
        super().__init__(message, source=source)
        self.kind = kind


class SourceApiError(SourceError):
    """Raised when the API answers with a non-2xx status.

    `cause` holds the parsed error envelope when the body is one; otherwise
    `body` carries the raw response text.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str,
        status_code: int,
        body: str,
        cause: ApiErrorBody | None = None,
    ) -> None:
        super().__init__(message, source=source)
        self.status_code = status_code
        self.body = body
        self.cause = cause


class SourceResponseError(SourceError):
    """Raised when a 2xx response body is not the expected JSON shape."""

    pass
