"""Source clients for the UniFi Network and Protect integration APIs."""

from unifi_metrics.sources.network import NetworkClient
from unifi_metrics.sources.protect import ProtectClient
from unifi_metrics.sources.types import (
    DeviceSource,
    SensorSource,
    SourceApiError,
    SourceError,
    SourceResponseError,
    SourceTransportError,
    Topology,
)

__all__ = [
    "NetworkClient",
    "ProtectClient",
    "DeviceSource",
    "SensorSource",
    "Topology",
    "SourceError",
    "SourceApiError",
    "SourceResponseError",
    "SourceTransportError",
]
