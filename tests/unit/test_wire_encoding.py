"""Tests for the JSON wire encoders."""

import json
from types import MappingProxyType

import pytest

from pagetelemetry.core.encoding.wire import (
    bundle_stats_to_dict,
    encode_analytics_event,
    encode_report_batch,
    encode_samples,
    report_to_dict,
    sample_to_dict,
)
from pagetelemetry.core.models import (
    BundleStats,
    ErrorDetails,
    ErrorReport,
    Rating,
    ResourceStat,
    Sample,
)

pytestmark = [pytest.mark.unit, pytest.mark.core, pytest.mark.tier(1)]


@pytest.fixture
def sample() -> Sample:
    return Sample(
        name="LCP",
        value=2600.0,
        rating=Rating.NEEDS_IMPROVEMENT,
        delta=2600.0,
        id="LCP-1702300000000",
    )


@pytest.fixture
def report() -> ErrorReport:
    return ErrorReport(
        error=ErrorDetails(name="TypeError", message="x is undefined", stack="..."),
        timestamp="2024-01-01T00:00:00.000Z",
        url="https://example.com/",
        user_agent="Mozilla/5.0",
        session_id="session-1-abc",
    )


class TestSampleEncoding:
    def test_sample_to_dict(self, sample: Sample) -> None:
        assert sample_to_dict(sample) == {
            "name": "LCP",
            "value": 2600.0,
            "rating": "needs-improvement",
            "delta": 2600.0,
            "id": "LCP-1702300000000",
        }

    def test_encode_samples_is_ndjson(self, sample: Sample) -> None:
        other = Sample(name="CLS", value=0.02, rating=Rating.GOOD, delta=0.02, id="c")

        output = encode_samples([sample, other])

        lines = output.strip().split("\n")
        assert output.endswith("\n")
        assert [json.loads(line)["name"] for line in lines] == ["LCP", "CLS"]

    def test_encode_no_samples(self) -> None:
        assert encode_samples([]) == ""

    def test_analytics_event_merges_context(self, sample: Sample) -> None:
        body = encode_analytics_event(
            sample,
            {"url": "https://example.com/", "userAgent": "UA", "timestamp": 1},
        )

        assert body["rating"] == "needs-improvement"
        assert body["userAgent"] == "UA"
        assert body["timestamp"] == 1


class TestReportEncoding:
    def test_required_fields_use_camel_case(self, report: ErrorReport) -> None:
        assert report_to_dict(report) == {
            "error": {"name": "TypeError", "message": "x is undefined", "stack": "..."},
            "timestamp": "2024-01-01T00:00:00.000Z",
            "url": "https://example.com/",
            "userAgent": "Mozilla/5.0",
            "sessionId": "session-1-abc",
        }

    def test_optional_fields_present_when_set(self) -> None:
        report = ErrorReport(
            error=ErrorDetails(name="Error", message="m"),
            timestamp="t",
            url="",
            user_agent="",
            session_id="s",
            error_info="at Cart",
            user_id="u-1",
            build_version="2.0.0",
            context=MappingProxyType({"step": 3}),
        )

        obj = report_to_dict(report)

        assert obj["errorInfo"] == "at Cart"
        assert obj["userId"] == "u-1"
        assert obj["buildVersion"] == "2.0.0"
        assert obj["context"] == {"step": 3}
        json.dumps(obj)

    def test_batch_body(self, report: ErrorReport) -> None:
        metadata = {"timestamp": "t", "environment": "production", "buildVersion": None}

        body = encode_report_batch([report, report], metadata)

        assert len(body["reports"]) == 2
        assert body["metadata"] == metadata
        json.dumps(body)


class TestBundleStatsEncoding:
    def test_bundle_stats_to_dict(self) -> None:
        stats = BundleStats(
            scripts=[ResourceStat(name="app.js", size=1000, duration=12.5)],
            stylesheets=[],
            total_transfer_size=1000,
        )

        assert bundle_stats_to_dict(stats) == {
            "scripts": [{"name": "app.js", "size": 1000, "duration": 12.5}],
            "stylesheets": [],
            "totalTransferSize": 1000,
        }
