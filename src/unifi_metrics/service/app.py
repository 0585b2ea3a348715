"""FastAPI service application (HTTP front door).

Endpoints:
- GET /health: liveness check, fixed plain-text body, never authenticated
- GET /metrics: OpenMetrics snapshot, optionally gated by a bearer token

The topology cache and metrics store are constructed explicitly and handed
to `create_app`; request handlers read them from `app.state` and never wait
for a poll cycle.
"""

import hmac
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from unifi_metrics import __version__
from unifi_metrics.config.settings import AppConfig
from unifi_metrics.metrics.exposition import OPENMETRICS_CONTENT_TYPE, render
from unifi_metrics.metrics.store import MetricsStore
from unifi_metrics.poller.cycles import initialize_topology
from unifi_metrics.poller.scheduler import PollScheduler
from unifi_metrics.sources.network import NetworkClient
from unifi_metrics.sources.protect import ProtectClient
from unifi_metrics.telemetry import (
    METRICS_RENDERED,
    METRICS_REQUEST_UNAUTHORIZED,
    SERVICE_READY,
    SERVICE_STARTING,
    SERVICE_STOPPED,
    get_logger,
)
from unifi_metrics.topology.cache import TopologyCache

log = get_logger(__name__)

HEALTH_BODY = "OK"
UNAUTHORIZED_BODY = "Unauthorized"


class UnauthorizedError(Exception):
    """Raised when /metrics is requested without the configured bearer token."""

    pass


def build_network_client(settings: AppConfig) -> NetworkClient:
    return NetworkClient(
        base_url=settings.network_base_url,
        api_token=settings.api_token,
        timeout_seconds=settings.request_timeout_seconds,
        verify_tls=settings.verify_tls,
    )


def build_protect_client(settings: AppConfig) -> ProtectClient:
    return ProtectClient(
        base_url=settings.protect_base_url,
        api_token=settings.api_token,
        timeout_seconds=settings.request_timeout_seconds,
        verify_tls=settings.verify_tls,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open source clients, discover the topology and start the poll loops."""
    settings: AppConfig = app.state.settings
    cache: TopologyCache = app.state.cache
    store: MetricsStore = app.state.store

    log.info(SERVICE_STARTING, version=__version__, port=settings.port)

    network_client: NetworkClient | None = None
    protect_client: ProtectClient | None = None
    scheduler: PollScheduler | None = None

    try:
        if settings.monitor_network_devices:
            network_client = app.state.network_client or build_network_client(settings)
            log.info("network_monitoring_initializing", base_url=settings.network_base_url)
            await initialize_topology(network_client, cache)

        if settings.monitor_protect_sensors:
            protect_client = app.state.protect_client or build_protect_client(settings)

        default_interval = settings.poll_interval_seconds
        scheduler = PollScheduler(
            cache,
            store,
            network_source=network_client,
            protect_source=protect_client,
            network_interval_seconds=settings.network_poll_interval_seconds or default_interval,
            protect_interval_seconds=settings.protect_poll_interval_seconds or default_interval,
        )
        await scheduler.start()
        app.state.scheduler = scheduler

        log.info(
            SERVICE_READY, port=settings.port, auth_enabled=settings.bearer_token is not None
        )

        yield
    finally:
        if scheduler is not None:
            await scheduler.stop()
        for client in (network_client, protect_client):
            if client is not None:
                await client.aclose()

        log.info(SERVICE_STOPPED)


def get_store(request: Request) -> MetricsStore:
    return request.app.state.store


def require_bearer_token(request: Request) -> None:
    """Reject the request unless it carries the configured bearer token.

    No-op when no token is configured.

    Raises:
        UnauthorizedError: On a missing or mismatching Authorization header.
    """
    expected: str | None = request.app.state.settings.bearer_token
    if expected is None:
        return

    provided = request.headers.get("authorization", "")
    if not hmac.compare_digest(provided.encode(), f"Bearer {expected}".encode()):
        log.warning(
            METRICS_REQUEST_UNAUTHORIZED,
            client=request.client.host if request.client else None,
            header_present=bool(provided),
        )
        raise UnauthorizedError()


async def unauthorized_handler(request: Request, exc: Exception) -> PlainTextResponse:
    return PlainTextResponse(
        UNAUTHORIZED_BODY, status_code=401, headers={"WWW-Authenticate": "Bearer"}
    )


def create_app(
    settings: AppConfig,
    cache: TopologyCache | None = None,
    store: MetricsStore | None = None,
    network_client: NetworkClient | None = None,
    protect_client: ProtectClient | None = None,
) -> FastAPI:
    """Build the FastAPI application around explicitly constructed stores.

    Args:
        settings: Loaded configuration.
        cache: Topology cache (a new empty one by default).
        store: Metrics store (a new empty one by default).
        network_client: Optional pre-built Network client (built from settings otherwise).
        protect_client: Optional pre-built Protect client (built from settings otherwise).

    Returns:
        Configured FastAPI app. Polling starts with the app lifespan.
    """
    app = FastAPI(
        title="UniFi Metrics Exporter",
        description="OpenMetrics exporter for UniFi Network devices and Protect sensors",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.cache = cache if cache is not None else TopologyCache()
    app.state.store = store if store is not None else MetricsStore()
    app.state.network_client = network_client
    app.state.protect_client = protect_client
    app.state.scheduler = None
    app.add_exception_handler(UnauthorizedError, unauthorized_handler)

    @app.get("/health", response_class=PlainTextResponse)
    async def health_check() -> str:
        """Liveness check."""
        return HEALTH_BODY

    @app.get("/metrics", dependencies=[Depends(require_bearer_token)])
    async def metrics(store: MetricsStore = Depends(get_store)) -> Response:  # noqa: B008
        """Render the current metrics snapshot."""
        body = render(store)
        log.debug(METRICS_RENDERED, bytes=len(body))
        return Response(content=body, media_type=OPENMETRICS_CONTENT_TYPE)

    return app
