"""Network transports implementing the delivery ports."""

from pagetelemetry.adapters.transport.http import (
    HttpAnalyticsTransport,
    HttpReportTransport,
)

__all__ = [
    "HttpAnalyticsTransport",
    "HttpReportTransport",
]
