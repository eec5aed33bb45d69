"""Core domain models for page telemetry data."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class Rating(StrEnum):
    """Qualitative bucket for a metric value."""

    GOOD = "good"
    NEEDS_IMPROVEMENT = "needs-improvement"
    POOR = "poor"


@dataclass(frozen=True)
class TimingEntry:
    """A raw entry produced by a runtime instrumentation source.

    Attributes:
        entry_type: Source type (e.g., "layout-shift", "navigation", "resource").
        name: Entry name. For resource entries this is the resource URL.
        start_time: Offset in milliseconds from the start of the page session.
        duration: Entry duration in milliseconds.
        processing_start: First-input entries only.
        value: Layout-shift score.
        had_recent_input: Layout-shift entries caused by recent user input.
        fetch_start: Navigation entries only.
        response_start: Navigation entries only.
        transfer_size: Resource and navigation entries; None when not exposed.
    """

    entry_type: str
    name: str = ""
    start_time: float = 0.0
    duration: float = 0.0
    processing_start: float | None = None
    value: float | None = None
    had_recent_input: bool = False
    fetch_start: float | None = None
    response_start: float | None = None
    transfer_size: int | None = None


@dataclass(frozen=True)
class Sample:
    """A single classified measurement of a runtime metric.

    Attributes:
        name: Metric name (e.g., LCP, CLS).
        value: Measured value.
        rating: Classification of value for this metric.
        delta: Change since the previous sample with the same name.
        id: Name plus generation time in epoch milliseconds.
    """

    name: str
    value: float
    rating: Rating
    delta: float
    id: str


@dataclass(frozen=True)
class ErrorDetails:
    """Serializable description of a raised fault."""

    name: str
    message: str
    stack: str = ""


@dataclass(frozen=True)
class HostContext:
    """Ambient context of the page or request a report is captured in."""

    url: str = ""
    user_agent: str = ""


@dataclass(frozen=True)
class ErrorReport:
    """A captured fault plus the ambient context at capture time.

    Attributes:
        error: Name, message and stack of the fault.
        timestamp: ISO 8601 UTC capture time.
        url: Page or request URL, empty outside a page.
        user_agent: Client user agent, empty outside a page.
        session_id: Session the fault was captured in.
        error_info: Extra fault information (e.g., component stack).
        user_id: Optional user identifier.
        build_version: Build the fault was captured in.
        context: Caller-supplied context, read-only once captured.
    """

    error: ErrorDetails
    timestamp: str
    url: str
    user_agent: str
    session_id: str
    error_info: str | None = None
    user_id: str | None = None
    build_version: str | None = None
    context: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResourceStat:
    """Transfer size and load duration of one buffered resource."""

    name: str
    size: int
    duration: float


@dataclass(frozen=True)
class BundleStats:
    """Summary of buffered script and stylesheet loads."""

    scripts: list[ResourceStat] = field(default_factory=list)
    stylesheets: list[ResourceStat] = field(default_factory=list)
    total_transfer_size: int = 0
