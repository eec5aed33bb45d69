"""Python logging handler adapter for pagetelemetry.

This adapter bridges Python's standard library logging module to the
ReportDispatcher, so errors an application already logs are queued as
error reports without extra call sites.
"""

import logging
from typing import Any

from pagetelemetry.core.logs import is_internal_record
from pagetelemetry.core.reporting import ReportDispatcher

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


class ReportingHandler(logging.Handler):
    """Logging handler that turns error records into error reports.

    Records carrying exception info are captured as that exception; other
    records become a report with the formatted message. Records emitted by
    pagetelemetry's own loggers are ignored so delivery failures cannot
    feed back into the queue.

    Example:
        ```python
        from pagetelemetry import ReportingHandler, create_telemetry

        telemetry = create_telemetry()
        logging.getLogger().addHandler(ReportingHandler(telemetry.dispatcher))
        ```
    """

    def __init__(
        self, dispatcher: ReportDispatcher, level: int = logging.ERROR
    ) -> None:
        """Initialize the handler.

        Args:
            dispatcher: Dispatcher that receives the reports.
            level: Minimum level forwarded (default: ERROR).
        """
        super().__init__(level)
        self._dispatcher = dispatcher

    def emit(self, record: logging.LogRecord) -> None:
        """Queue an error report for the record.

        Args:
            record: The log record to emit.
        """
        if is_internal_record(record):
            return

        context: dict[str, Any] = {
            "logger": record.name,
            "module": record.module,
            "funcName": record.funcName or "",
            "lineno": record.lineno,
        }
        # Add any extra attributes passed via logging call
        for key, value in record.__dict__.items():
            if key not in _STANDARD_LOGRECORD_ATTRS and isinstance(
                value, (str, int, float, bool)
            ):
                context[key] = value

        try:
            exc_value = record.exc_info[1] if record.exc_info else None
            if exc_value is not None:
                self._dispatcher.capture_exception(
                    exc_value, error_info=record.getMessage(), context=context
                )
            else:
                self._dispatcher.report_error(record.getMessage(), context)
        except Exception:
            self.handleError(record)
