"""Core Web Vitals collection from runtime instrumentation."""

import time
from collections.abc import Callable, Sequence

from pagetelemetry.core.context import get_host_context
from pagetelemetry.core.logs import get_logger
from pagetelemetry.core.models import Rating, Sample, TimingEntry
from pagetelemetry.core.ports import (
    AnalyticsSink,
    AnalyticsTransportPort,
    InstrumentationSourcePort,
    MetricRegistryPort,
    SubscriptionPort,
)
from pagetelemetry.core.rating import RatingClassifier
from pagetelemetry.core.tasks import BackgroundTasks

logger = get_logger(__name__)

LARGEST_PAINT = "largest-contentful-paint"
FIRST_INPUT = "first-input"
LAYOUT_SHIFT = "layout-shift"
NAVIGATION = "navigation"

_RATING_MARKERS = {
    Rating.GOOD: "[good]",
    Rating.NEEDS_IMPROVEMENT: "[needs-improvement]",
    Rating.POOR: "[poor]",
}


def _forward_to_sink(sink: AnalyticsSink, sample: Sample) -> None:
    sink(
        "event",
        sample.name,
        {
            "event_category": "Web Vitals",
            "value": round(sample.value),
            "custom_parameter_1": sample.rating.value,
        },
    )


def report_web_vitals(
    sample: Sample,
    sink: AnalyticsSink | None = None,
    environment: str = "development",
) -> None:
    """Log a sample in development and forward it to an analytics sink.

    Args:
        sample: The sample to report.
        sink: gtag-shaped callback, called as sink("event", name, params).
        environment: Execution mode; samples are logged only in development.
    """
    if environment == "development":
        logger.info("Web Vital: %s", sample)
    if sink is not None:
        _forward_to_sink(sink, sample)


class MetricCollector:
    """Bridges instrumentation entries into classified samples.

    Subscribes on construction to largest-paint, first-input, layout-shift
    and navigation entries. Each computed value is classified, stored in the
    registry under its metric name, forwarded to the analytics sink and, in
    production with an analytics transport, posted fire-and-forget.

    Args:
        source: Instrumentation runtime, or None outside a page (nothing is
            observed).
        registry: Latest-sample store owned by this collector.
        classifier: Rating classifier (default thresholds when omitted).
        analytics: Transport for best-effort sample delivery.
        sink: gtag-shaped analytics callback.
        environment: "development", "production" or "test".
        clock: Returns epoch milliseconds; used for sample ids and payloads.
    """

    def __init__(
        self,
        source: InstrumentationSourcePort | None,
        registry: MetricRegistryPort,
        classifier: RatingClassifier | None = None,
        analytics: AnalyticsTransportPort | None = None,
        sink: AnalyticsSink | None = None,
        environment: str = "development",
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._source = source
        self._registry = registry
        self._classifier = classifier or RatingClassifier()
        self._analytics = analytics
        self._sink = sink
        self._environment = environment
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._subscriptions: dict[str, SubscriptionPort] = {}
        self._tasks = BackgroundTasks()
        self._first_input_seen = False
        self._layout_shift_total = 0.0

        if source is not None:
            self._observe(LARGEST_PAINT, self._on_largest_paint)
            self._observe(FIRST_INPUT, self._on_first_input)
            self._observe(LAYOUT_SHIFT, self._on_layout_shift)
            self._observe(NAVIGATION, self._on_navigation)

    @property
    def observed_types(self) -> list[str]:
        """Entry types with an active subscription."""
        return list(self._subscriptions)

    def _observe(
        self, entry_type: str, callback: Callable[[Sequence[TimingEntry]], None]
    ) -> None:
        assert self._source is not None
        if not self._source.supports(entry_type):
            logger.debug("Instrumentation for %s unavailable, skipping", entry_type)
            return
        try:
            subscription = self._source.observe(entry_type, callback, buffered=True)
        except Exception:
            logger.warning("Failed to observe %s", entry_type, exc_info=True)
            return
        self._subscriptions[entry_type] = subscription

    def _on_largest_paint(self, entries: Sequence[TimingEntry]) -> None:
        # Later candidates supersede earlier ones.
        if entries:
            self._report("LCP", entries[-1].start_time)

    def _on_first_input(self, entries: Sequence[TimingEntry]) -> None:
        if self._first_input_seen or not entries:
            return
        first = next((e for e in entries if e.processing_start is not None), None)
        if first is None:
            logger.debug("First-input entries without processing_start, skipping")
            return
        self._first_input_seen = True
        self._report("FID", first.processing_start - first.start_time)

    def _on_layout_shift(self, entries: Sequence[TimingEntry]) -> None:
        total = self._layout_shift_total
        for entry in entries:
            if not entry.had_recent_input and entry.value is not None:
                total += entry.value
        if total != self._layout_shift_total:
            self._layout_shift_total = total
            self._report("CLS", total)

    def _on_navigation(self, entries: Sequence[TimingEntry]) -> None:
        if not entries:
            return
        navigation = entries[0]
        if navigation.response_start is None or navigation.fetch_start is None:
            logger.debug("Navigation entry without fetch timings, skipping")
            return
        self._report("TTFB", navigation.response_start - navigation.fetch_start)

    def _report(self, name: str, value: float) -> Sample:
        previous = self._registry.get(name)
        sample = Sample(
            name=name,
            value=value,
            rating=self._classifier.classify(name, value),
            delta=value if previous is None else value - previous.value,
            id=f"{name}-{self._clock()}",
        )
        self._registry.write(sample)
        self._log_sample(sample)

        if self._sink is not None:
            try:
                _forward_to_sink(self._sink, sample)
            except Exception:
                logger.warning("Analytics sink rejected %s", name, exc_info=True)

        if self._environment == "production" and self._analytics is not None:
            self._tasks.spawn(self._send_to_analytics(sample))
        return sample

    def _log_sample(self, sample: Sample) -> None:
        if self._environment != "development":
            return
        logger.info(
            "%s %s: %.2f (%s)",
            _RATING_MARKERS[sample.rating],
            sample.name,
            sample.value,
            sample.rating.value,
        )

    async def _send_to_analytics(self, sample: Sample) -> None:
        assert self._analytics is not None
        host = get_host_context()
        try:
            await self._analytics.send(
                sample,
                {
                    "url": host.url,
                    "userAgent": host.user_agent,
                    "timestamp": self._clock(),
                },
            )
        except Exception:
            logger.warning("Failed to send analytics for %s", sample.name, exc_info=True)

    def get_metrics(self) -> list[Sample]:
        """Return the latest sample of every collected metric."""
        return self._registry.snapshot()

    def get_metric(self, name: str) -> Sample | None:
        """Return the latest sample for one metric, if collected."""
        return self._registry.get(name)

    def disconnect(self) -> None:
        """Disconnect every instrumentation subscription."""
        for entry_type, subscription in list(self._subscriptions.items()):
            try:
                subscription.disconnect()
            except Exception:
                logger.warning("Failed to disconnect %s", entry_type, exc_info=True)
        self._subscriptions.clear()

    async def drain(self) -> None:
        """Wait for outstanding analytics deliveries to finish."""
        await self._tasks.drain()
