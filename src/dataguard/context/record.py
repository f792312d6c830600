"""Record models - raw data items and their disclosed views.

A Record is owned by the external data source and is never mutated here.
A DisclosedRecord is the new value object produced by the redaction filter.
"""

from __future__ import annotations

__all__ = ["DisclosedRecord", "Record"]

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_validator


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so age comparisons never mix kinds."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Record(BaseModel):
    """A raw mail record as supplied by the data source.

    Attributes:
        id: Source identifier.
        sender: Sender address or display name.
        subject: Subject line.
        timestamp: When the record was received (UTC).
        body: Full body text.
        category: Optional pre-tagged category from the source
            (e.g., "delivery", or "general" for untagged mail).
    """

    id: str
    sender: str
    subject: str
    timestamp: datetime
    body: str = ""
    category: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("timestamp", mode="after")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        return _as_utc(v)


class DisclosedRecord(BaseModel):
    """A policy-compliant view of a Record.

    Each of subject, sender and body is independently either the original
    value or the redaction marker.
    """

    id: str
    sender: str
    subject: str
    timestamp: datetime
    body: str
    category: str | None = None

    model_config = ConfigDict(frozen=True)
