"""Audit logging for negotiation decisions."""

from dataguard.telemetry.audit.decision_logger import (
    NegotiationEventLogger,
    create_decision_logger,
    get_decisions_log_path,
)

__all__ = [
    "NegotiationEventLogger",
    "create_decision_logger",
    "get_decisions_log_path",
]
