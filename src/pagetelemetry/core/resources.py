"""Bundle statistics from buffered resource entries."""

from urllib.parse import urlsplit

from pagetelemetry.core.models import BundleStats, ResourceStat, TimingEntry
from pagetelemetry.core.ports import ResourceTimelinePort

RESOURCE = "resource"


def _path(entry: TimingEntry) -> str:
    return urlsplit(entry.name).path


def _to_stat(entry: TimingEntry) -> ResourceStat:
    return ResourceStat(
        name=_path(entry).rsplit("/", 1)[-1],
        size=entry.transfer_size or 0,
        duration=entry.duration,
    )


class ResourceStatsAggregator:
    """Summarizes script and stylesheet loads already buffered by the runtime.

    No subscription is made; each snapshot reads the runtime's history, so
    two snapshots without new resource activity are equal.

    Args:
        timeline: Buffered entry history, or None outside a page.
    """

    def __init__(self, timeline: ResourceTimelinePort | None) -> None:
        self._timeline = timeline

    def snapshot(self) -> BundleStats:
        """Return script and stylesheet stats plus total transfer size.

        Transfer size is 0 for entries that do not expose it (e.g.,
        cross-origin resources without timing headers). The total covers
        every resource entry, not just scripts and stylesheets.
        """
        if self._timeline is None:
            return BundleStats()

        entries = self._timeline.get_entries_by_type(RESOURCE)
        return BundleStats(
            scripts=[_to_stat(e) for e in entries if _path(e).endswith(".js")],
            stylesheets=[_to_stat(e) for e in entries if _path(e).endswith(".css")],
            total_transfer_size=sum(e.transfer_size or 0 for e in entries),
        )
