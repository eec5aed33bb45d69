"""Storage adapters implementing core ports."""

from pagetelemetry.adapters.storage.in_memory import (
    InMemoryMetricRegistry,
    InMemorySessionStorage,
)

__all__ = [
    "InMemoryMetricRegistry",
    "InMemorySessionStorage",
]
