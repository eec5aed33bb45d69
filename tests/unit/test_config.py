"""Tests for TelemetrySettings."""

import pytest
from pydantic import ValidationError

from pagetelemetry.config import TelemetrySettings
from pagetelemetry.core.session import DEFAULT_SESSION_KEY

pytestmark = [pytest.mark.unit, pytest.mark.tier(1)]

_VARS = [
    "TELEMETRY_ENVIRONMENT",
    "TELEMETRY_ERROR_REPORTING_ENDPOINT",
    "TELEMETRY_ANALYTICS_ENDPOINT",
    "TELEMETRY_BUILD_VERSION",
    "TELEMETRY_REQUEST_TIMEOUT",
    "TELEMETRY_POLL_INTERVAL",
    "TELEMETRY_SESSION_KEY",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the way.
    monkeypatch.chdir(tmp_path)


class TestTelemetrySettings:
    def test_defaults(self) -> None:
        settings = TelemetrySettings()

        assert settings.environment == "development"
        assert settings.error_reporting_endpoint is None
        assert settings.analytics_endpoint is None
        assert settings.build_version is None
        assert settings.request_timeout == 10.0
        assert settings.poll_interval == 2.0
        assert settings.session_key == DEFAULT_SESSION_KEY

    def test_reads_prefixed_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TELEMETRY_ENVIRONMENT", "production")
        monkeypatch.setenv(
            "TELEMETRY_ERROR_REPORTING_ENDPOINT", "https://errors.example.com/api"
        )
        monkeypatch.setenv("TELEMETRY_BUILD_VERSION", "3.1.0")
        monkeypatch.setenv("TELEMETRY_REQUEST_TIMEOUT", "2.5")

        settings = TelemetrySettings()

        assert settings.environment == "production"
        assert settings.error_reporting_endpoint == "https://errors.example.com/api"
        assert settings.build_version == "3.1.0"
        assert settings.request_timeout == 2.5

    def test_reads_dotenv_file(self, tmp_path) -> None:
        (tmp_path / ".env").write_text("TELEMETRY_ANALYTICS_ENDPOINT=/api/vitals\n")

        assert TelemetrySettings().analytics_endpoint == "/api/vitals"

    def test_unknown_environment_rejected(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TELEMETRY_ENVIRONMENT", "staging")

        with pytest.raises(ValidationError):
            TelemetrySettings()

    @pytest.mark.parametrize("field", ["request_timeout", "poll_interval"])
    def test_non_positive_durations_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError):
            TelemetrySettings(**{field: 0})
