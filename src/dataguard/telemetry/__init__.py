"""Telemetry for dataguard: structured audit events and their loggers."""
