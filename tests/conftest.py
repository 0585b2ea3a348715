"""Shared fixtures for the test suite."""

import pytest

from unifi_metrics.metrics.store import MetricsStore
from unifi_metrics.topology.cache import TopologyCache


@pytest.fixture
def cache() -> TopologyCache:
    return TopologyCache()


@pytest.fixture
def store() -> MetricsStore:
    return MetricsStore()
