"""Environment-driven configuration."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagetelemetry.core.session import DEFAULT_SESSION_KEY

Environment = Literal["development", "production", "test"]


class TelemetrySettings(BaseSettings):
    """Telemetry settings read from ``TELEMETRY_*`` environment variables.

    An unset endpoint disables the corresponding network path without error.
    """

    model_config = SettingsConfigDict(
        env_prefix="TELEMETRY_", env_file=".env", extra="ignore"
    )

    environment: Environment = "development"
    error_reporting_endpoint: str | None = None
    analytics_endpoint: str | None = None
    build_version: str | None = None
    request_timeout: float = Field(default=10.0, gt=0)
    poll_interval: float = Field(default=2.0, gt=0)
    session_key: str = DEFAULT_SESSION_KEY
