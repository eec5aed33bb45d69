"""Test doubles for the delivery ports."""

from collections.abc import Iterable, Mapping
from typing import Any

from pagetelemetry.core.models import ErrorReport, Sample


class FakeReportTransport:
    """ReportTransportPort double that records batches and can fail on demand."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.batches: list[list[ErrorReport]] = []
        self.metadata: list[dict[str, Any]] = []
        self.calls = 0

    async def send(
        self, reports: Iterable[ErrorReport], metadata: Mapping[str, Any]
    ) -> None:
        self.calls += 1
        if self.fail:
            raise ConnectionError("collector unreachable")
        self.batches.append(list(reports))
        self.metadata.append(dict(metadata))


class FakeAnalyticsTransport:
    """AnalyticsTransportPort double that records samples."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[Sample, dict[str, Any]]] = []

    async def send(self, sample: Sample, context: Mapping[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("analytics unreachable")
        self.sent.append((sample, dict(context)))
