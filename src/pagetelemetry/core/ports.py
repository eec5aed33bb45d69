"""Port interfaces for telemetry adapters.

These protocols define the contracts that adapters must implement.
The core domain depends only on these interfaces, not concrete implementations.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from pagetelemetry.core.models import ErrorReport, Sample, TimingEntry

EntryCallback = Callable[[Sequence[TimingEntry]], None]

# gtag-shaped analytics callback: sink("event", name, params)
AnalyticsSink = Callable[..., None]


@runtime_checkable
class SubscriptionPort(Protocol):
    """Handle for an active instrumentation subscription."""

    def disconnect(self) -> None:
        """Stop delivering entries to the subscribed callback."""
        ...


@runtime_checkable
class InstrumentationSourcePort(Protocol):
    """Port for runtime timing instrumentation.

    Examples: PerformanceTimeline.
    """

    def supports(self, entry_type: str) -> bool:
        """Return True if the runtime produces entries of this type."""
        ...

    def observe(
        self, entry_type: str, callback: EntryCallback, buffered: bool = True
    ) -> SubscriptionPort:
        """Subscribe a callback to batches of entries of one type.

        Args:
            entry_type: Entry type to observe.
            callback: Receives each batch of new entries.
            buffered: Deliver already-buffered entries immediately.

        Raises:
            SubscriptionUnavailableError: If the type is not supported.
        """
        ...


@runtime_checkable
class ResourceTimelinePort(Protocol):
    """Port for reading the runtime's buffered entry history."""

    def get_entries_by_type(self, entry_type: str) -> list[TimingEntry]:
        """Return buffered entries of the given type, oldest first."""
        ...


@runtime_checkable
class MetricRegistryPort(Protocol):
    """Port for the latest-sample-per-metric registry.

    Examples: InMemoryMetricRegistry.
    """

    def write(self, sample: Sample) -> None:
        """Store a sample, replacing any previous sample with the same name."""
        ...

    def get(self, name: str) -> Sample | None:
        """Return the latest sample for a metric name."""
        ...

    def snapshot(self) -> list[Sample]:
        """Return the latest sample of every metric."""
        ...


@runtime_checkable
class SessionStoragePort(Protocol):
    """Port for session-scoped key/value storage.

    Examples: InMemorySessionStorage.
    """

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...


@runtime_checkable
class ReportTransportPort(Protocol):
    """Port for delivering error report batches.

    Implementations raise on failure so the dispatcher can requeue.
    """

    async def send(
        self, reports: Iterable[ErrorReport], metadata: Mapping[str, Any]
    ) -> None:
        """Deliver a batch of reports in a single request."""
        ...


@runtime_checkable
class AnalyticsTransportPort(Protocol):
    """Port for best-effort delivery of a single sample."""

    async def send(self, sample: Sample, context: Mapping[str, Any]) -> None:
        """Deliver one sample with its ambient context."""
        ...
