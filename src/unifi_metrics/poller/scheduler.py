"""Periodic poll scheduling.

Runs the network and protect poll cycles as two independent asyncio tasks,
each on its own interval. Every loop sleeps before its first cycle: the
initial fetch happens once at startup, outside the loop.
"""

import asyncio
from collections.abc import Awaitable, Callable

from unifi_metrics.metrics.records import NETWORK_POLL, PROTECT_POLL
from unifi_metrics.metrics.store import MetricsStore
from unifi_metrics.poller.cycles import poll_devices, poll_sensors
from unifi_metrics.sources.types import DeviceSource, SensorSource
from unifi_metrics.telemetry import POLL_LOOP_ERROR, get_logger
from unifi_metrics.topology.cache import TopologyCache

log = get_logger(__name__)


class PollScheduler:
    """Scheduler for the two poll loops.

    Usage:
        scheduler = PollScheduler(cache, store, network_source=..., protect_source=...)
        await scheduler.start()  # Runs in background
        # ... later ...
        await scheduler.stop()

    A loop is only started for a source that was provided.
    """

    def __init__(
        self,
        cache: TopologyCache,
        store: MetricsStore,
        network_source: DeviceSource | None = None,
        protect_source: SensorSource | None = None,
        network_interval_seconds: float = 30.0,
        protect_interval_seconds: float = 30.0,
    ) -> None:
        self.cache = cache
        self.store = store
        self.network_source = network_source
        self.protect_source = protect_source
        self.network_interval_seconds = network_interval_seconds
        self.protect_interval_seconds = protect_interval_seconds
        self.running = False
        self._tasks: dict[str, asyncio.Task[None]] = {}

    async def start(self) -> None:
        """Start the background poll loops."""
        if self.running:
            log.warning("poll_scheduler_already_running")
            return

        self.running = True

        network_source = self.network_source
        if network_source is not None:
            self._tasks[NETWORK_POLL] = asyncio.create_task(
                self._loop(
                    NETWORK_POLL,
                    self.network_interval_seconds,
                    lambda: poll_devices(network_source, self.cache, self.store),
                ),
                name=f"poll-{NETWORK_POLL}",
            )

        protect_source = self.protect_source
        if protect_source is not None:
            self._tasks[PROTECT_POLL] = asyncio.create_task(
                self._loop(
                    PROTECT_POLL,
                    self.protect_interval_seconds,
                    lambda: poll_sensors(protect_source, self.store),
                ),
                name=f"poll-{PROTECT_POLL}",
            )

        log.info(
            "poll_scheduler_started",
            loops=sorted(self._tasks),
            network_interval_s=self.network_interval_seconds,
            protect_interval_s=self.protect_interval_seconds,
        )

    async def stop(self) -> None:
        """Cancel the poll loops. An in-flight cycle is abandoned, not drained."""
        self.running = False
        pending = [task for task in self._tasks.values() if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._tasks.clear()
        log.info("poll_scheduler_stopped")

    @property
    def loops(self) -> list[str]:
        """Names of the loops currently scheduled."""
        return sorted(name for name, task in self._tasks.items() if not task.done())

    async def _loop(
        self, name: str, interval_seconds: float, cycle: Callable[[], Awaitable[bool]]
    ) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + interval_seconds
        while self.running:
            try:
                # Fixed rate: the cycle duration does not push back the next tick.
                await asyncio.sleep(max(0.0, next_tick - loop.time()))
                next_tick += interval_seconds
                await cycle()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.error(POLL_LOOP_ERROR, loop=name, error=str(e), exc_info=True)
