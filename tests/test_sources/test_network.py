"""Tests for the UniFi Network client using httpx.MockTransport."""

import json
from collections.abc import Callable

import httpx
import pytest

from unifi_metrics.sources.network import DEVICES_PAGE_SIZE, SITES_PAGE_SIZE, NetworkClient
from unifi_metrics.sources.types import (
    SourceApiError,
    SourceResponseError,
    SourceTransportError,
)

BASE_URL = "https://10.0.0.1/proxy/network/integration/v1"
BASE_PATH = "/proxy/network/integration/v1"


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> NetworkClient:
    return NetworkClient(
        base_url=BASE_URL, api_token="secret-key", transport=httpx.MockTransport(handler)
    )


def page(data: list[dict], offset: int, total: int | None) -> dict:
    body = {"offset": offset, "limit": len(data), "count": len(data), "data": data}
    if total is not None:
        body["totalCount"] = total
    return body


def site(n: int) -> dict:
    return {"id": f"S{n}", "name": f"Site {n}", "internalReference": "default"}


def device(n: int, state: str = "ONLINE") -> dict:
    return {
        "id": f"D{n}",
        "name": f"Device {n}",
        "model": "U6-Pro",
        "macAddress": "aa:bb:cc:dd:ee:ff",
        "ipAddress": f"10.0.0.{n}",
        "state": state,
        "features": ["accessPoint"],
    }


class TestFetchTopology:
    """Test site and device discovery."""

    @pytest.mark.asyncio
    async def test_sites_and_devices(self) -> None:
        """Sites are listed, then devices per site."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.path == f"{BASE_PATH}/sites":
                return httpx.Response(200, json=page([site(1)], 0, 1))
            if request.url.path == f"{BASE_PATH}/sites/S1/devices":
                return httpx.Response(200, json=page([device(1), device(2, "OFFLINE")], 0, 2))
            return httpx.Response(404)

        async with make_client(handler) as client:
            topology = await client.fetch_topology()

        assert [s.id for s in topology.sites] == ["S1"]
        devices = topology.devices["S1"]
        assert [d.id for d in devices] == ["D1", "D2"]
        assert devices[0].ip_address == "10.0.0.1"
        assert devices[1].state == "OFFLINE"
        assert requests[0].headers["X-API-KEY"] == "secret-key"
        assert requests[0].url.params["limit"] == str(SITES_PAGE_SIZE)
        assert requests[1].url.params["limit"] == str(DEVICES_PAGE_SIZE)

    @pytest.mark.asyncio
    async def test_follows_pagination(self) -> None:
        """Pages are requested with increasing offsets until totalCount is reached."""
        offsets: list[str] = []
        all_sites = [site(n) for n in range(30)]

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == f"{BASE_PATH}/sites":
                offset = int(request.url.params["offset"])
                limit = int(request.url.params["limit"])
                offsets.append(request.url.params["offset"])
                return httpx.Response(
                    200, json=page(all_sites[offset : offset + limit], offset, len(all_sites))
                )
            return httpx.Response(200, json=page([], 0, 0))

        async with make_client(handler) as client:
            topology = await client.fetch_topology()

        assert offsets == ["0", "25"]
        assert len(topology.sites) == 30
        assert topology.sites[-1].id == "S29"

    @pytest.mark.asyncio
    async def test_stops_without_total_count(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            if request.url.path == f"{BASE_PATH}/sites":
                calls += 1
                return httpx.Response(200, json=page([site(1)], 0, None))
            return httpx.Response(200, json=page([], 0, 0))

        async with make_client(handler) as client:
            topology = await client.fetch_topology()

        assert calls == 1
        assert len(topology.sites) == 1

    @pytest.mark.asyncio
    async def test_site_device_failure_skips_site(self) -> None:
        """A site whose devices cannot be listed is kept without devices."""

        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if path == f"{BASE_PATH}/sites":
                return httpx.Response(200, json=page([site(1), site(2)], 0, 2))
            if path == f"{BASE_PATH}/sites/S1/devices":
                return httpx.Response(500, text="boom")
            return httpx.Response(200, json=page([device(3)], 0, 1))

        async with make_client(handler) as client:
            topology = await client.fetch_topology()

        assert [s.id for s in topology.sites] == ["S1", "S2"]
        assert "S1" not in topology.devices
        assert [d.id for d in topology.devices["S2"]] == ["D3"]

    @pytest.mark.asyncio
    async def test_site_list_failure_is_raised(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "Unauthorized", "name": "UNAUTHORIZED"})

        async with make_client(handler) as client:
            with pytest.raises(SourceApiError) as exc_info:
                await client.fetch_topology()

        assert exc_info.value.status_code == 401
        assert exc_info.value.source == "network"


class TestFetchDeviceStats:
    """Test device statistics requests."""

    @pytest.mark.asyncio
    async def test_parses_statistics(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(
                200,
                json={
                    "uptimeSec": 3600,
                    "lastHeartbeatAt": "2024-01-01T00:00:00Z",
                    "loadAverage1Min": 0.5,
                    "cpuUtilizationPct": 57.3,
                    "memoryUtilizationPct": 40.0,
                    "uplink": {"txRateBps": 1000, "rxRateBps": 2000},
                },
            )

        async with make_client(handler) as client:
            stats = await client.fetch_device_stats("S1", "D1")

        assert seen == [f"{BASE_PATH}/sites/S1/devices/D1/statistics/latest"]
        assert stats.cpu_utilization_pct == 57.3
        assert stats.memory_utilization_pct == 40.0
        assert stats.load_average_1min == 0.5
        assert stats.uplink_tx_rate == 1000
        assert stats.uplink_rx_rate == 2000

    @pytest.mark.asyncio
    async def test_missing_fields_are_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"uptimeSec": 10})

        async with make_client(handler) as client:
            stats = await client.fetch_device_stats("S1", "D1")

        assert stats.cpu_utilization_pct is None
        assert stats.uplink_tx_rate is None
        assert stats.uplink_rx_rate is None


class TestErrorMapping:
    """Test mapping of httpx failures onto source errors."""

    @pytest.mark.asyncio
    async def test_error_envelope_is_parsed(self) -> None:
        body = {
            "error": "Device not found",
            "name": "NOT_FOUND",
            "cause": {"error": "no such id", "name": "LOOKUP"},
        }

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json=body)

        async with make_client(handler) as client:
            with pytest.raises(SourceApiError) as exc_info:
                await client.fetch_device_stats("S1", "D1")

        error = exc_info.value
        assert error.status_code == 404
        assert error.cause is not None
        assert error.cause.name == "NOT_FOUND"
        assert error.cause.cause is not None
        assert error.cause.cause.name == "LOOKUP"
        assert str(error) == "UniFi Network API error (404): NOT_FOUND - Device not found"
        assert json.loads(error.body) == body

    @pytest.mark.asyncio
    async def test_unstructured_error_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        async with make_client(handler) as client:
            with pytest.raises(SourceApiError) as exc_info:
                await client.fetch_device_stats("S1", "D1")

        assert exc_info.value.cause is None
        assert str(exc_info.value) == "UniFi Network API error (502): Bad Gateway"

    @pytest.mark.asyncio
    async def test_auth_hint_not_used_for_network(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "bad key", "name": "API_ERROR"})

        async with make_client(handler) as client:
            with pytest.raises(SourceApiError) as exc_info:
                await client.fetch_device_stats("S1", "D1")

        assert "authentication failed" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(handler) as client:
            with pytest.raises(SourceTransportError) as exc_info:
                await client.fetch_device_stats("S1", "D1")

        assert exc_info.value.kind == "timeout"

    @pytest.mark.asyncio
    async def test_connection_refused(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(SourceTransportError) as exc_info:
                await client.fetch_topology()

        assert exc_info.value.kind == "connect"
        assert exc_info.value.source == "network"

    @pytest.mark.asyncio
    async def test_other_request_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.RemoteProtocolError("peer closed", request=request)

        async with make_client(handler) as client:
            with pytest.raises(SourceTransportError) as exc_info:
                await client.fetch_device_stats("S1", "D1")

        assert exc_info.value.kind == "request"

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>login</html>")

        async with make_client(handler) as client:
            with pytest.raises(SourceResponseError):
                await client.fetch_device_stats("S1", "D1")

    @pytest.mark.asyncio
    async def test_wrong_shape(self) -> None:
        """A page without required device fields is a response error."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=page([{"id": "S1"}], 0, 1))

        async with make_client(handler) as client:
            with pytest.raises(SourceResponseError):
                await client.fetch_topology()
