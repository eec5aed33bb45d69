"""Error report capture, queueing and delivery.

ReportDispatcher builds an ErrorReport from a fault plus ambient context,
queues it, and flushes the queue to a ReportTransportPort as one batch.

Flush cycle:
    Idle -> Flushing -> Idle, guarded by a boolean. A flush requested while
    one is in flight is a no-op; reports queued meanwhile go out with a
    later flush.

Failure policy:
    A failed delivery puts the batch back at the front of the queue, ahead
    of anything captured during the attempt, so order and count are
    preserved. There is no backoff: the next capture in production, or an
    explicit flush(), retries.
"""

import traceback
from collections import deque
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

from pagetelemetry.core.context import get_host_context
from pagetelemetry.core.logs import get_logger, log_exception
from pagetelemetry.core.models import ErrorDetails, ErrorReport
from pagetelemetry.core.ports import ReportTransportPort
from pagetelemetry.core.session import SessionIdentity
from pagetelemetry.core.tasks import BackgroundTasks

logger = get_logger(__name__)


def _utc_timestamp() -> str:
    now = datetime.now(UTC)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def describe_error(error: BaseException) -> ErrorDetails:
    """Extract name, message and formatted stack from an exception."""
    stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    try:
        message = str(error)
    except Exception:
        message = f"<unprintable {type(error).__name__}>"
    return ErrorDetails(name=type(error).__name__, message=message, stack=stack)


class ReportQueue:
    """FIFO of error reports awaiting delivery, oldest first."""

    def __init__(self) -> None:
        self._reports: deque[ErrorReport] = deque()

    def append(self, report: ErrorReport) -> None:
        self._reports.append(report)

    def take_all(self) -> list[ErrorReport]:
        """Remove and return every queued report."""
        batch = list(self._reports)
        self._reports.clear()
        return batch

    def requeue_front(self, batch: Iterable[ErrorReport]) -> None:
        """Put an undelivered batch back ahead of newer reports, keeping its order."""
        self._reports.extendleft(reversed(list(batch)))

    def pending(self) -> list[ErrorReport]:
        """Return a copy of the queued reports."""
        return list(self._reports)

    def __len__(self) -> int:
        return len(self._reports)

    def __bool__(self) -> bool:
        return bool(self._reports)


class ReportDispatcher:
    """Captures faults into a queue and flushes it to a remote endpoint.

    Args:
        session: Resolves the session id of reports captured without one.
        transport: Delivery transport; None disables delivery (reports stay
            queued).
        environment: "development" logs each capture, "production" flushes
            after each capture.
        build_version: Build identifier attached to reports and metadata.
        queue: Report queue owned by this dispatcher.
        timestamp: Returns the ISO 8601 capture time.
    """

    def __init__(
        self,
        session: SessionIdentity,
        transport: ReportTransportPort | None = None,
        environment: str = "development",
        build_version: str | None = None,
        queue: ReportQueue | None = None,
        timestamp: Callable[[], str] = _utc_timestamp,
    ) -> None:
        self._session = session
        self._transport = transport
        self._environment = environment
        self._build_version = build_version
        self._queue = queue if queue is not None else ReportQueue()
        self._timestamp = timestamp
        self._flushing = False
        self._tasks = BackgroundTasks()

    @property
    def is_flushing(self) -> bool:
        return self._flushing

    def pending_reports(self) -> list[ErrorReport]:
        """Return the reports still waiting for delivery."""
        return self._queue.pending()

    def capture_exception(
        self,
        error: BaseException,
        *,
        error_info: str | None = None,
        user_id: str | None = None,
        session_id: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> ErrorReport:
        """Queue a report for an exception. Never raises.

        Args:
            error: The captured fault.
            error_info: Extra fault information (e.g., component stack).
            user_id: Optional user identifier.
            session_id: Session id; resolved via SessionIdentity when omitted.
            context: Caller-supplied context stored with the report.

        Returns:
            The queued report.
        """
        host = get_host_context()
        report = ErrorReport(
            error=describe_error(error),
            timestamp=self._timestamp(),
            url=host.url,
            user_agent=host.user_agent,
            session_id=session_id or self._session.get_session_id(),
            error_info=error_info,
            user_id=user_id,
            build_version=self._build_version,
            context=MappingProxyType(dict(context or {})),
        )
        self._queue.append(report)

        if self._environment == "development":
            logger.error("Error report: %s", report)
        elif self._environment == "production":
            self._tasks.spawn(self.flush())
        return report

    def report_error(
        self, message: str, context: Mapping[str, Any] | None = None
    ) -> ErrorReport:
        """Capture a synthetic exception carrying a message."""
        return self.capture_exception(Exception(message), context=context)

    def report_performance_issue(
        self,
        metric: str,
        value: float,
        context: Mapping[str, Any] | None = None,
    ) -> ErrorReport | None:
        """Capture a performance issue. Active in production only.

        Returns:
            The queued report, or None outside production.
        """
        if self._environment != "production":
            return None
        return self.report_error(
            f"Performance issue: {metric} = {value}",
            {"metric": metric, "value": value, **(context or {})},
        )

    async def flush(self) -> None:
        """Deliver every queued report as one batch.

        No-op while another flush is in flight, when the queue is empty, or
        when no transport is configured. On failure the batch is requeued
        at the front. Never raises.
        """
        if self._flushing or not self._queue:
            return
        if self._transport is None:
            logger.warning("No error reporting endpoint configured")
            return

        self._flushing = True
        batch = self._queue.take_all()
        try:
            await self._transport.send(batch, self._metadata())
            if self._environment == "development":
                logger.info("Successfully sent %d error reports", len(batch))
        except Exception:
            log_exception("Failed to send error reports", logger)
            self._queue.requeue_front(batch)
        finally:
            self._flushing = False

    def _metadata(self) -> dict[str, Any]:
        return {
            "timestamp": self._timestamp(),
            "environment": self._environment,
            "buildVersion": self._build_version,
        }

    async def drain(self) -> None:
        """Wait for flushes scheduled by captures to finish."""
        await self._tasks.drain()
