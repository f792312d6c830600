"""Logging helper utilities."""

__all__ = ["serialize_audit_event"]

from typing import Any

from pydantic import BaseModel


def serialize_audit_event(event: BaseModel) -> dict[str, Any]:
    """Serialize a Pydantic event model for audit logging.

    - Excludes the 'time' field (added by ISO8601Formatter at log time)
    - Excludes None values for cleaner logs
    - Uses JSON mode so datetimes and enums are plain strings

    Example:
        >>> event = NegotiationEvent(decision="ACCEPT", category="delivery", ...)
        >>> serialize_audit_event(event)
        {"decision": "ACCEPT", "category": "delivery", ...}
    """
    return event.model_dump(mode="json", exclude={"time"}, exclude_none=True)
