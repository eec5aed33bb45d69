"""Logger helpers shared by all pagetelemetry modules."""

import logging

PACKAGE_LOGGER = "pagetelemetry"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a standard library logger for a module.

    Args:
        name: Usually ``__name__`` of the calling module.
    """
    return logging.getLogger(name)


def log_exception(message: str, logger: logging.Logger | None = None) -> None:
    """Log the exception currently being handled at ERROR level.

    Args:
        message: Log message describing what failed.
        logger: Logger to use (default: the package logger).
    """
    (logger or logging.getLogger(PACKAGE_LOGGER)).error(message, exc_info=True)


def is_internal_record(record: logging.LogRecord) -> bool:
    """Return True if a record was emitted by a pagetelemetry logger."""
    return record.name == PACKAGE_LOGGER or record.name.startswith(
        f"{PACKAGE_LOGGER}."
    )
