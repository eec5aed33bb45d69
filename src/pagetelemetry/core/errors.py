"""Telemetry-specific exceptions.

None of these escape a public entry point: the collector and dispatcher
catch and log them so telemetry never destabilizes the host application.
"""


class TelemetryError(Exception):
    """Base class for telemetry errors."""


class SubscriptionUnavailableError(TelemetryError):
    """Raised when an instrumentation source does not support an entry type.

    Attributes:
        entry_type: The unsupported entry type.
    """

    def __init__(self, entry_type: str) -> None:
        self.entry_type = entry_type
        super().__init__(f"Entry type '{entry_type}' is not supported")


class DeliveryError(TelemetryError):
    """Raised by a transport when the endpoint rejects a delivery.

    Attributes:
        status_code: HTTP status returned by the endpoint.
        reason: HTTP reason phrase.
    """

    def __init__(self, status_code: int, reason: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"HTTP {status_code}: {reason}")
