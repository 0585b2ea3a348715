"""Topology cache for discovered sites and devices."""

from unifi_metrics.topology.cache import CachedDevice, CachedSite, TopologyCache

__all__ = ["CachedDevice", "CachedSite", "TopologyCache"]
