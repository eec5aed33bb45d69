"""Periodic metric polling and display helpers for dashboards."""

import asyncio
from collections.abc import Callable

from pagetelemetry.core.collector import MetricCollector
from pagetelemetry.core.logs import get_logger, log_exception
from pagetelemetry.core.models import BundleStats, Sample
from pagetelemetry.core.resources import ResourceStatsAggregator

logger = get_logger(__name__)

METRIC_DESCRIPTIONS = {
    "LCP": "Time for largest content element to render",
    "FID": "Time from first user interaction to browser response",
    "CLS": "Visual stability - lower is better",
    "TTFB": "Time to receive first byte from server",
}

_BYTE_UNITS = ["B", "KB", "MB", "GB"]


def format_value(name: str, value: float) -> str:
    """Format a metric value for display: CLS is unitless, the rest are ms."""
    if name == "CLS":
        return f"{value:.3f}"
    return f"{round(value)}ms"


def format_bytes(size: int) -> str:
    """Format a byte count using 1024-based units, e.g. ``1.5 KB``."""
    if size <= 0:
        return "0 B"
    exponent = 0
    while exponent < len(_BYTE_UNITS) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    scaled = round(size / 1024**exponent, 1)
    return f"{scaled:g} {_BYTE_UNITS[exponent]}"


def describe_metric(name: str) -> str:
    """Return a human-readable description of a metric, or empty string."""
    return METRIC_DESCRIPTIONS.get(name, "")


class MetricsPoller:
    """Polls a collector on a repeating timer for dashboard consumers.

    Polls once immediately on start, then every ``interval`` seconds. When a
    resource aggregator is given, one bundle snapshot is taken after
    ``resources_delay`` seconds. Always stop the poller (or use it as an
    async context manager); a poller left running keeps its task alive for
    the life of the event loop.

    Args:
        collector: Collector to read samples from.
        on_update: Receives the sample list on every poll.
        interval: Seconds between polls.
        resources: Aggregator for the delayed bundle snapshot.
        on_resources: Receives the bundle snapshot.
        resources_delay: Seconds to wait before the bundle snapshot.
    """

    def __init__(
        self,
        collector: MetricCollector,
        on_update: Callable[[list[Sample]], None],
        interval: float = 2.0,
        resources: ResourceStatsAggregator | None = None,
        on_resources: Callable[[BundleStats], None] | None = None,
        resources_delay: float = 1.0,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self._collector = collector
        self._on_update = on_update
        self._interval = interval
        self._resources = resources
        self._on_resources = on_resources
        self._resources_delay = resources_delay
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self) -> None:
        """Start polling on the running event loop. No-op if already running."""
        if self.running:
            return
        self._tasks = [asyncio.create_task(self._poll_loop())]
        if self._resources is not None and self._on_resources is not None:
            self._tasks.append(asyncio.create_task(self._snapshot_resources()))

    async def stop(self) -> None:
        """Cancel the polling timer and wait for it to finish."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def poll(self) -> list[Sample]:
        """Read the collector once and deliver the samples."""
        samples = self._collector.get_metrics()
        try:
            self._on_update(samples)
        except Exception:
            log_exception("Metrics poll callback failed", logger)
        return samples

    async def _poll_loop(self) -> None:
        while True:
            self.poll()
            await asyncio.sleep(self._interval)

    async def _snapshot_resources(self) -> None:
        assert self._resources is not None and self._on_resources is not None
        await asyncio.sleep(self._resources_delay)
        try:
            self._on_resources(self._resources.snapshot())
        except Exception:
            log_exception("Bundle stats callback failed", logger)

    async def __aenter__(self) -> "MetricsPoller":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
