"""In-memory storage adapters for samples and session state."""

from pagetelemetry.core.models import Sample


class InMemoryMetricRegistry:
    """In-memory implementation of MetricRegistryPort.

    Keeps the latest sample per metric name. Insertion order of first
    appearance is preserved in snapshots.
    """

    def __init__(self) -> None:
        self._samples: dict[str, Sample] = {}

    def write(self, sample: Sample) -> None:
        """Store a sample, replacing any previous sample with the same name."""
        self._samples[sample.name] = sample

    def get(self, name: str) -> Sample | None:
        """Return the latest sample for a metric name."""
        return self._samples.get(name)

    def snapshot(self) -> list[Sample]:
        """Return the latest sample of every metric."""
        return list(self._samples.values())

    def __len__(self) -> int:
        return len(self._samples)


class InMemorySessionStorage:
    """In-memory implementation of SessionStoragePort.

    One instance stands for one browsing session. Suitable for testing and
    for servers that track sessions per connection.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()
