"""In-process instrumentation runtime.

PerformanceTimeline plays the role a browser's performance timeline plays
for page scripts: producers record TimingEntry objects, observers receive
them in batches, and a bounded history per entry type can be read back.
Servers feed it from beacon payloads; tests feed it directly.
"""

from collections import deque
from collections.abc import Iterable, Sequence

from pagetelemetry.core.errors import SubscriptionUnavailableError
from pagetelemetry.core.logs import get_logger, log_exception
from pagetelemetry.core.models import TimingEntry
from pagetelemetry.core.ports import EntryCallback

logger = get_logger(__name__)

DEFAULT_ENTRY_TYPES = frozenset(
    {
        "largest-contentful-paint",
        "first-input",
        "layout-shift",
        "navigation",
        "resource",
    }
)


class TimelineSubscription:
    """Subscription returned by PerformanceTimeline.observe()."""

    def __init__(
        self, timeline: "PerformanceTimeline", entry_type: str, callback: EntryCallback
    ) -> None:
        self._timeline = timeline
        self.entry_type = entry_type
        self.callback = callback
        self.connected = True

    def disconnect(self) -> None:
        """Stop delivering entries. Safe to call more than once."""
        if self.connected:
            self.connected = False
            self._timeline._remove(self)


class PerformanceTimeline:
    """Implementation of InstrumentationSourcePort and ResourceTimelinePort.

    Each entry type keeps its history in a fixed-size ring buffer; when the
    buffer is full the oldest entry is evicted.

    Args:
        supported_types: Entry types this runtime produces.
        max_buffer_size: Maximum buffered entries per entry type.
    """

    def __init__(
        self,
        supported_types: Iterable[str] = DEFAULT_ENTRY_TYPES,
        max_buffer_size: int = 250,
    ) -> None:
        if max_buffer_size < 1:
            raise ValueError(f"max_buffer_size must be >= 1, got {max_buffer_size}")
        self._supported = frozenset(supported_types)
        self._max_buffer_size = max_buffer_size
        self._buffers: dict[str, deque[TimingEntry]] = {}
        self._subscriptions: list[TimelineSubscription] = []

    def supports(self, entry_type: str) -> bool:
        return entry_type in self._supported

    def observe(
        self, entry_type: str, callback: EntryCallback, buffered: bool = True
    ) -> TimelineSubscription:
        """Subscribe a callback to batches of entries of one type.

        Raises:
            SubscriptionUnavailableError: If the type is not supported.
        """
        if not self.supports(entry_type):
            raise SubscriptionUnavailableError(entry_type)
        subscription = TimelineSubscription(self, entry_type, callback)
        self._subscriptions.append(subscription)
        history = self.get_entries_by_type(entry_type)
        if buffered and history:
            self._deliver(subscription, history)
        return subscription

    def record(self, *entries: TimingEntry) -> None:
        """Record entries and deliver them to observers, one batch per type.

        Entries of unsupported types are dropped.
        """
        batches: dict[str, list[TimingEntry]] = {}
        for entry in entries:
            if not self.supports(entry.entry_type):
                logger.debug("Dropping entry of unsupported type %s", entry.entry_type)
                continue
            self._buffer(entry.entry_type).append(entry)
            batches.setdefault(entry.entry_type, []).append(entry)

        for entry_type, batch in batches.items():
            for subscription in list(self._subscriptions):
                if subscription.entry_type == entry_type and subscription.connected:
                    self._deliver(subscription, batch)

    def get_entries_by_type(self, entry_type: str) -> list[TimingEntry]:
        """Return buffered entries of the given type, oldest first."""
        return list(self._buffers.get(entry_type, ()))

    def clear(self, entry_type: str | None = None) -> None:
        """Clear buffered history for one type, or for all types."""
        if entry_type is None:
            self._buffers.clear()
        else:
            self._buffers.pop(entry_type, None)

    @property
    def observer_count(self) -> int:
        return len(self._subscriptions)

    def _buffer(self, entry_type: str) -> deque[TimingEntry]:
        if entry_type not in self._buffers:
            self._buffers[entry_type] = deque(maxlen=self._max_buffer_size)
        return self._buffers[entry_type]

    def _deliver(
        self, subscription: TimelineSubscription, batch: Sequence[TimingEntry]
    ) -> None:
        try:
            subscription.callback(list(batch))
        except Exception:
            log_exception(
                f"Observer for {subscription.entry_type} entries failed", logger
            )

    def _remove(self, subscription: TimelineSubscription) -> None:
        self._subscriptions.remove(subscription)
