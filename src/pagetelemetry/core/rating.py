"""Threshold-based rating of metric values."""

from collections.abc import Mapping
from dataclasses import dataclass

from pagetelemetry.core.models import Rating


@dataclass(frozen=True)
class Thresholds:
    """Upper bounds (inclusive) of the good and needs-improvement tiers."""

    good: float
    poor: float


DEFAULT_THRESHOLDS: Mapping[str, Thresholds] = {
    "LCP": Thresholds(good=2500, poor=4000),
    "FID": Thresholds(good=100, poor=300),
    "CLS": Thresholds(good=0.1, poor=0.25),
    "TTFB": Thresholds(good=800, poor=1800),
}


def classify(
    name: str,
    value: float,
    thresholds: Mapping[str, Thresholds] = DEFAULT_THRESHOLDS,
) -> Rating:
    """Classify a metric value.

    A value equal to a threshold falls in the better tier. Metrics without
    configured thresholds always rate good.

    Args:
        name: Metric name (e.g., "LCP").
        value: Measured value.
        thresholds: Threshold table keyed by metric name.

    Returns:
        The Rating for the value.
    """
    threshold = thresholds.get(name)
    if threshold is None:
        return Rating.GOOD
    if value <= threshold.good:
        return Rating.GOOD
    if value <= threshold.poor:
        return Rating.NEEDS_IMPROVEMENT
    return Rating.POOR


class RatingClassifier:
    """Classifier bound to a threshold table.

    Args:
        thresholds: Threshold table (default: Core Web Vitals thresholds).
    """

    def __init__(self, thresholds: Mapping[str, Thresholds] | None = None) -> None:
        self._thresholds = dict(
            DEFAULT_THRESHOLDS if thresholds is None else thresholds
        )

    @property
    def thresholds(self) -> Mapping[str, Thresholds]:
        return dict(self._thresholds)

    def classify(self, name: str, value: float) -> Rating:
        """Classify a metric value against this classifier's thresholds."""
        return classify(name, value, self._thresholds)
