"""Shared test fixtures for all test modules."""

from typing import Any

import httpx
import pytest

from pagetelemetry.adapters.instrumentation import PerformanceTimeline
from pagetelemetry.adapters.storage.in_memory import (
    InMemoryMetricRegistry,
    InMemorySessionStorage,
)
from pagetelemetry.core.context import clear_host_context, set_default_host_context
from pagetelemetry.core.reporting import ReportDispatcher
from pagetelemetry.core.session import SessionIdentity
from tests.fakes import FakeAnalyticsTransport, FakeReportTransport


@pytest.fixture(autouse=True)
def _reset_host_context():
    """Ensure no host context leaks between tests."""
    clear_host_context()
    yield
    clear_host_context()
    set_default_host_context()


@pytest.fixture
def timeline() -> PerformanceTimeline:
    """Fresh instrumentation runtime supporting every default entry type."""
    return PerformanceTimeline()


@pytest.fixture
def registry() -> InMemoryMetricRegistry:
    return InMemoryMetricRegistry()


@pytest.fixture
def session_storage() -> InMemorySessionStorage:
    return InMemorySessionStorage()


@pytest.fixture
def report_transport() -> FakeReportTransport:
    return FakeReportTransport()


@pytest.fixture
def analytics_transport() -> FakeAnalyticsTransport:
    return FakeAnalyticsTransport()


@pytest.fixture
def fixed_clock():
    """Clock returning a constant epoch-millisecond value."""
    return lambda: 1702300000000


@pytest.fixture
def make_dispatcher(session_storage: InMemorySessionStorage):
    """Factory fixture for dispatchers sharing one session storage."""

    def _make(
        transport: Any = None, environment: str = "test", **kwargs: Any
    ) -> ReportDispatcher:
        return ReportDispatcher(
            SessionIdentity(session_storage),
            transport=transport,
            environment=environment,
            timestamp=lambda: "2024-01-01T00:00:00.000Z",
            **kwargs,
        )

    return _make


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            async with asgi_test_client(app) as client:
                response = await client.get("/vitals")
    """

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
