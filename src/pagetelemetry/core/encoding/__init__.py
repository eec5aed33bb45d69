"""Wire encoders for telemetry payloads."""
