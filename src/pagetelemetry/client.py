"""Application-wide telemetry handle.

Build one Telemetry per application with create_telemetry() and pass it to
every collaborator that reports errors or reads metrics.
"""

from collections.abc import Callable, Mapping
from typing import Any

import httpx

from pagetelemetry.adapters.storage.in_memory import InMemoryMetricRegistry
from pagetelemetry.adapters.transport.http import (
    HttpAnalyticsTransport,
    HttpReportTransport,
)
from pagetelemetry.config import TelemetrySettings
from pagetelemetry.core.collector import MetricCollector
from pagetelemetry.core.models import BundleStats, ErrorReport, Sample
from pagetelemetry.core.ports import (
    AnalyticsSink,
    AnalyticsTransportPort,
    InstrumentationSourcePort,
    ReportTransportPort,
    ResourceTimelinePort,
    SessionStoragePort,
)
from pagetelemetry.core.rating import RatingClassifier
from pagetelemetry.core.reporting import ReportDispatcher
from pagetelemetry.core.resources import ResourceStatsAggregator
from pagetelemetry.core.session import SessionIdentity
from pagetelemetry.dashboard import MetricsPoller


class Telemetry:
    """Collaborator-facing API over the collector, dispatcher and aggregator."""

    def __init__(
        self,
        collector: MetricCollector,
        dispatcher: ReportDispatcher,
        resources: ResourceStatsAggregator,
        transports: list[Any] | None = None,
        poll_interval: float = 2.0,
    ) -> None:
        self.collector = collector
        self.dispatcher = dispatcher
        self.resources = resources
        self.poll_interval = poll_interval
        self._transports = transports or []

    def capture_exception(
        self,
        error: BaseException,
        *,
        error_info: str | None = None,
        user_id: str | None = None,
        session_id: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> ErrorReport:
        return self.dispatcher.capture_exception(
            error,
            error_info=error_info,
            user_id=user_id,
            session_id=session_id,
            context=context,
        )

    def report_error(
        self, message: str, context: Mapping[str, Any] | None = None
    ) -> ErrorReport:
        return self.dispatcher.report_error(message, context)

    def report_performance_issue(
        self, metric: str, value: float, context: Mapping[str, Any] | None = None
    ) -> ErrorReport | None:
        return self.dispatcher.report_performance_issue(metric, value, context)

    def get_metrics(self) -> list[Sample]:
        return self.collector.get_metrics()

    def get_metric(self, name: str) -> Sample | None:
        return self.collector.get_metric(name)

    def bundle_stats(self) -> BundleStats:
        return self.resources.snapshot()

    def poller(
        self,
        on_update: Callable[[list[Sample]], None],
        on_resources: Callable[[BundleStats], None] | None = None,
        resources_delay: float = 1.0,
    ) -> MetricsPoller:
        """Return a dashboard poller using the configured poll interval.

        The poller is not started; call start() or use it as an async
        context manager.
        """
        return MetricsPoller(
            self.collector,
            on_update,
            interval=self.poll_interval,
            resources=self.resources if on_resources is not None else None,
            on_resources=on_resources,
            resources_delay=resources_delay,
        )

    async def flush(self) -> None:
        await self.dispatcher.flush()

    def disconnect(self) -> None:
        self.collector.disconnect()

    async def aclose(self) -> None:
        """Disconnect, attempt a final flush and close owned transports."""
        self.disconnect()
        await self.collector.drain()
        await self.dispatcher.drain()
        await self.dispatcher.flush()
        for transport in self._transports:
            await transport.aclose()


def create_telemetry(
    settings: TelemetrySettings | None = None,
    source: InstrumentationSourcePort | None = None,
    timeline: ResourceTimelinePort | None = None,
    session_storage: SessionStoragePort | None = None,
    sink: AnalyticsSink | None = None,
    report_transport: ReportTransportPort | None = None,
    analytics_transport: AnalyticsTransportPort | None = None,
    classifier: RatingClassifier | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Telemetry:
    """Wire up a Telemetry handle.

    Transports not passed explicitly are created from the configured
    endpoints; an unset endpoint leaves that path disabled.

    Args:
        settings: Configuration (default: read from the environment).
        source: Instrumentation runtime to collect metrics from.
        timeline: Buffered history for bundle stats (default: source, when
            it also implements ResourceTimelinePort).
        session_storage: Session-scoped storage; None means a server context.
        sink: gtag-shaped analytics callback.
        report_transport: Override for error report delivery.
        analytics_transport: Override for sample delivery.
        classifier: Rating classifier with custom thresholds.
        http_client: Shared client for the HTTP transports.

    Returns:
        A Telemetry handle with its collector already subscribed.
    """
    settings = settings or TelemetrySettings()
    owned: list[Any] = []

    if report_transport is None and settings.error_reporting_endpoint:
        report_transport = HttpReportTransport(
            settings.error_reporting_endpoint,
            client=http_client,
            timeout=settings.request_timeout,
        )
        owned.append(report_transport)
    if analytics_transport is None and settings.analytics_endpoint:
        analytics_transport = HttpAnalyticsTransport(
            settings.analytics_endpoint,
            client=http_client,
            timeout=settings.request_timeout,
        )
        owned.append(analytics_transport)

    if timeline is None and isinstance(source, ResourceTimelinePort):
        timeline = source

    collector = MetricCollector(
        source,
        InMemoryMetricRegistry(),
        classifier=classifier,
        analytics=analytics_transport,
        sink=sink,
        environment=settings.environment,
    )
    dispatcher = ReportDispatcher(
        SessionIdentity(session_storage, key=settings.session_key),
        transport=report_transport,
        environment=settings.environment,
        build_version=settings.build_version,
    )
    return Telemetry(
        collector,
        dispatcher,
        ResourceStatsAggregator(timeline),
        transports=owned,
        poll_interval=settings.poll_interval,
    )
