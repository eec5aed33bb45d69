"""BDD step definitions for report delivery and Web Vitals features."""

import pytest
from pytest_bdd import given, parsers, then, when
from tests.fakes import FakeReportTransport
from tests.features.reporting.steps_helpers import (
    TelemetryScenarioContext,
    new_collector,
    run_async,
)

from pagetelemetry.core.models import TimingEntry
from pagetelemetry.core.reporting import ReportDispatcher
from pagetelemetry.core.session import SessionIdentity


@pytest.fixture
def ctx() -> TelemetryScenarioContext:
    """Fresh scenario context for each test."""
    return TelemetryScenarioContext()


def _dispatcher(ctx: TelemetryScenarioContext) -> ReportDispatcher:
    assert ctx.dispatcher is not None
    return ctx.dispatcher


def _use_dispatcher(
    ctx: TelemetryScenarioContext,
    transport: FakeReportTransport | None,
    environment: str = "test",
) -> None:
    ctx.transport = transport
    ctx.dispatcher = ReportDispatcher(
        SessionIdentity(ctx.session_storage),
        transport=transport,
        environment=environment,
    )


# === Report delivery ===
@given("a fresh session storage")
def step_session_storage(ctx: TelemetryScenarioContext) -> None:
    ctx.session_storage.clear()


@given("a dispatcher in production without an endpoint")
def step_dispatcher_without_endpoint(ctx: TelemetryScenarioContext) -> None:
    _use_dispatcher(ctx, None, environment="production")


@given("a dispatcher with a working endpoint")
def step_dispatcher_working(ctx: TelemetryScenarioContext) -> None:
    _use_dispatcher(ctx, FakeReportTransport())


@given("a dispatcher with a failing endpoint")
def step_dispatcher_failing(ctx: TelemetryScenarioContext) -> None:
    _use_dispatcher(ctx, FakeReportTransport(fail=True))


@when(parsers.parse("{count:d} errors are captured"))
def step_capture(ctx: TelemetryScenarioContext, count: int) -> None:
    for _ in range(count):
        ctx.captured += 1
        _dispatcher(ctx).capture_exception(ValueError(f"error {ctx.captured}"))


@when("the queue is flushed")
def step_flush(ctx: TelemetryScenarioContext) -> None:
    run_async(_dispatcher(ctx).flush())


@when("the endpoint recovers")
def step_recover(ctx: TelemetryScenarioContext) -> None:
    assert ctx.transport is not None
    ctx.transport.fail = False


@then(parsers.parse("{count:d} reports are pending"))
def step_pending(ctx: TelemetryScenarioContext, count: int) -> None:
    assert len(_dispatcher(ctx).pending_reports()) == count


@then("no delivery was attempted")
def step_no_delivery(ctx: TelemetryScenarioContext) -> None:
    assert ctx.transport is None or ctx.transport.calls == 0


@then(parsers.parse("{batches:d} batch of {size:d} reports was delivered"))
def step_delivered(ctx: TelemetryScenarioContext, batches: int, size: int) -> None:
    assert ctx.transport is not None
    assert len(ctx.transport.batches) == batches
    assert all(len(batch) == size for batch in ctx.transport.batches)


@then(parsers.parse('the pending reports are "{messages}"'))
def step_pending_order(ctx: TelemetryScenarioContext, messages: str) -> None:
    pending = [r.error.message for r in _dispatcher(ctx).pending_reports()]
    assert pending == messages.split(", ")


@then("every pending report has the same session id")
def step_same_session(ctx: TelemetryScenarioContext) -> None:
    ids = {r.session_id for r in _dispatcher(ctx).pending_reports()}
    assert len(ids) == 1


@then(parsers.parse('the session id is stored under "{key}"'))
def step_session_stored(ctx: TelemetryScenarioContext, key: str) -> None:
    (session_id,) = {r.session_id for r in _dispatcher(ctx).pending_reports()}
    assert ctx.session_storage.get_item(key) == session_id


# === Web Vitals ===
@given("a collector observing a performance timeline")
def step_collector(ctx: TelemetryScenarioContext) -> None:
    ctx.collector = new_collector(ctx.timeline)


@when(parsers.parse("a largest-contentful-paint entry at {at:g} ms is recorded"))
def step_paint(ctx: TelemetryScenarioContext, at: float) -> None:
    ctx.timeline.record(
        TimingEntry(entry_type="largest-contentful-paint", start_time=at)
    )


@when(parsers.parse("a layout shift of {value:g} following user input is recorded"))
def step_shift_after_input(ctx: TelemetryScenarioContext, value: float) -> None:
    ctx.timeline.record(
        TimingEntry(entry_type="layout-shift", value=value, had_recent_input=True)
    )


@when(parsers.parse("a layout shift of {value:g} is recorded"))
def step_shift(ctx: TelemetryScenarioContext, value: float) -> None:
    ctx.timeline.record(TimingEntry(entry_type="layout-shift", value=value))


@when(parsers.parse("a first input processed after {delay:g} ms is recorded"))
def step_first_input(ctx: TelemetryScenarioContext, delay: float) -> None:
    ctx.timeline.record(
        TimingEntry(
            entry_type="first-input", start_time=1000.0, processing_start=1000.0 + delay
        )
    )


@when(
    parsers.parse(
        "a navigation entry with fetch start {fetch:g} and response start "
        "{response:g} is recorded"
    )
)
def step_navigation(
    ctx: TelemetryScenarioContext, fetch: float, response: float
) -> None:
    ctx.timeline.record(
        TimingEntry(entry_type="navigation", fetch_start=fetch, response_start=response)
    )


@then(parsers.parse('the "{name}" sample is {value:g} rated "{rating}"'))
def step_sample(
    ctx: TelemetryScenarioContext, name: str, value: float, rating: str
) -> None:
    assert ctx.collector is not None
    sample = ctx.collector.get_metric(name)
    assert sample is not None
    assert sample.value == pytest.approx(value)
    assert sample.rating == rating
