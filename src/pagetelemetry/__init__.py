"""pagetelemetry: Core Web Vitals collection and error report delivery."""

from pagetelemetry.adapters.instrumentation import PerformanceTimeline
from pagetelemetry.adapters.logging import ReportingHandler
from pagetelemetry.adapters.storage.in_memory import (
    InMemoryMetricRegistry,
    InMemorySessionStorage,
)
from pagetelemetry.client import Telemetry, create_telemetry
from pagetelemetry.config import TelemetrySettings
from pagetelemetry.core.collector import MetricCollector, report_web_vitals
from pagetelemetry.core.logs import get_logger
from pagetelemetry.core.models import (
    BundleStats,
    ErrorReport,
    Rating,
    ResourceStat,
    Sample,
    TimingEntry,
)
from pagetelemetry.core.rating import RatingClassifier, Thresholds, classify
from pagetelemetry.core.reporting import ReportDispatcher, ReportQueue
from pagetelemetry.core.resources import ResourceStatsAggregator
from pagetelemetry.core.session import SessionIdentity

__all__ = [
    "BundleStats",
    "ErrorReport",
    "InMemoryMetricRegistry",
    "InMemorySessionStorage",
    "MetricCollector",
    "PerformanceTimeline",
    "Rating",
    "RatingClassifier",
    "ReportDispatcher",
    "ReportQueue",
    "ReportingHandler",
    "ResourceStat",
    "ResourceStatsAggregator",
    "Sample",
    "SessionIdentity",
    "Telemetry",
    "TelemetrySettings",
    "Thresholds",
    "TimingEntry",
    "classify",
    "create_telemetry",
    "get_logger",
    "report_web_vitals",
]
