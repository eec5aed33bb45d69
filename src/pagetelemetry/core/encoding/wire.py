"""JSON wire encoders for samples, error reports and bundle stats.

Wire payloads use camelCase keys, matching what browser-side collectors
and dashboards expect.
"""

import json
from collections.abc import Iterable, Mapping
from typing import Any

from pagetelemetry.core.models import BundleStats, ErrorReport, ResourceStat, Sample


def sample_to_dict(sample: Sample) -> dict[str, Any]:
    """Convert a sample to its wire representation."""
    return {
        "name": sample.name,
        "value": sample.value,
        "rating": sample.rating.value,
        "delta": sample.delta,
        "id": sample.id,
    }


def report_to_dict(report: ErrorReport) -> dict[str, Any]:
    """Convert an error report to its wire representation.

    Optional fields that are unset are omitted.
    """
    obj: dict[str, Any] = {
        "error": {
            "name": report.error.name,
            "message": report.error.message,
            "stack": report.error.stack,
        },
        "timestamp": report.timestamp,
        "url": report.url,
        "userAgent": report.user_agent,
        "sessionId": report.session_id,
    }
    optional = {
        "errorInfo": report.error_info,
        "userId": report.user_id,
        "buildVersion": report.build_version,
    }
    obj.update({key: value for key, value in optional.items() if value is not None})
    if report.context:
        obj["context"] = dict(report.context)
    return obj


def encode_report_batch(
    reports: Iterable[ErrorReport], metadata: Mapping[str, Any]
) -> dict[str, Any]:
    """Build the JSON body of an error report delivery."""
    return {
        "reports": [report_to_dict(report) for report in reports],
        "metadata": dict(metadata),
    }


def encode_analytics_event(
    sample: Sample, context: Mapping[str, Any]
) -> dict[str, Any]:
    """Build the JSON body of an analytics delivery for one sample."""
    return {**sample_to_dict(sample), **context}


def _resource_to_dict(stat: ResourceStat) -> dict[str, Any]:
    return {"name": stat.name, "size": stat.size, "duration": stat.duration}


def bundle_stats_to_dict(stats: BundleStats) -> dict[str, Any]:
    """Convert bundle stats to their wire representation."""
    return {
        "scripts": [_resource_to_dict(s) for s in stats.scripts],
        "stylesheets": [_resource_to_dict(s) for s in stats.stylesheets],
        "totalTransferSize": stats.total_transfer_size,
    }


def encode_samples(samples: Iterable[Sample]) -> str:
    """Encode samples to newline-delimited JSON.

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no samples.
    """
    lines = [json.dumps(sample_to_dict(sample), default=str) for sample in samples]
    if not lines:
        return ""
    return "\n".join(lines) + "\n"
