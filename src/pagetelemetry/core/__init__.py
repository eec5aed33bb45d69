"""Core telemetry domain: models, ports and services."""
