"""Redaction filter - produce the minimal disclosed view of a record set.

Pipeline:
1. Select records that satisfy the predicate (classifier, age filter first)
2. Truncate to the allowed count, preserving input order
3. Redact subject, sender and body independently per field

Field visibility:
- subject: shown iff policy.show_subject_info
- sender:  shown iff policy.show_sender_info
- body:    shown iff bodies are permitted by the policy AND by the
           negotiated terms (if any)

When a body is shown but personal info is not permitted, email addresses
and phone numbers inside the body are replaced with the redaction marker.

Input records are never mutated; new DisclosedRecord values are returned.
"""

from __future__ import annotations

__all__ = [
    "Disclosure",
    "filter_records",
    "redact_record",
    "scrub_personal_info",
]

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from dataguard.constants import REDACTION_MARKER
from dataguard.context import DisclosedRecord, Predicate, Record
from dataguard.pdp.decision import AdjustedPolicy
from dataguard.pdp.matcher import classify
from dataguard.pdp.policy import Policy
from dataguard.utils.clock import utc_now

# Personal info patterns scrubbed from visible bodies
_EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_PHONE_PATTERN = re.compile(r"\+?\d[\d\s().-]{7,}\d")


@dataclass(frozen=True, slots=True)
class Disclosure:
    """Resolved field visibility for one filter call.

    Attributes:
        show_subject: Subject is disclosed.
        show_sender: Sender is disclosed.
        show_body: Body is disclosed.
        scrub_personal_info: Personal info in visible bodies is masked.
        max_count: Max records disclosed.
    """

    show_subject: bool
    show_sender: bool
    show_body: bool
    scrub_personal_info: bool
    max_count: int

    @classmethod
    def resolve(cls, policy: Policy, adjusted: AdjustedPolicy | None = None) -> "Disclosure":
        """Combine the policy with negotiated terms (tightest wins).

        Args:
            policy: Base policy.
            adjusted: Negotiated terms, if any.

        Returns:
            Disclosure that is never looser than the policy.
        """
        redact_bodies = policy.redact_email_bodies
        redact_personal_info = policy.redact_personal_info
        max_count = policy.max_emails_per_request
        if adjusted is not None:
            redact_bodies = redact_bodies or adjusted.redact_bodies
            redact_personal_info = redact_personal_info or adjusted.redact_personal_info
            max_count = min(max_count, adjusted.max_count)
        return cls(
            show_subject=policy.show_subject_info,
            show_sender=policy.show_sender_info,
            show_body=not redact_bodies,
            scrub_personal_info=redact_personal_info,
            max_count=max_count,
        )


def scrub_personal_info(text: str) -> str:
    """Mask email addresses and phone numbers in free text."""
    text = _EMAIL_PATTERN.sub(REDACTION_MARKER, text)
    return _PHONE_PATTERN.sub(REDACTION_MARKER, text)


def redact_record(record: Record, disclosure: Disclosure) -> DisclosedRecord:
    """Build the disclosed view of one record.

    Args:
        record: Source record (not modified).
        disclosure: Resolved field visibility.

    Returns:
        New DisclosedRecord.
    """
    if disclosure.show_body:
        body = scrub_personal_info(record.body) if disclosure.scrub_personal_info else record.body
    else:
        body = REDACTION_MARKER

    return DisclosedRecord(
        id=record.id,
        subject=record.subject if disclosure.show_subject else REDACTION_MARKER,
        sender=record.sender if disclosure.show_sender else REDACTION_MARKER,
        timestamp=record.timestamp,
        body=body,
        category=record.category,
    )


def filter_records(
    records: Sequence[Record],
    predicate: Predicate,
    policy: Policy,
    adjusted: AdjustedPolicy | None = None,
    now: datetime | None = None,
) -> list[DisclosedRecord]:
    """Select, truncate and redact records.

    Args:
        records: Records from the data source.
        predicate: Predicate selecting matching records.
        policy: Policy snapshot.
        adjusted: Negotiated terms for the transaction, if any.
        now: Reference time for the age filter. Defaults to current UTC.

    Returns:
        Disclosed records in input order, at most the allowed count.
    """
    reference = now if now is not None else utc_now()
    disclosure = Disclosure.resolve(policy, adjusted)

    selected: list[DisclosedRecord] = []
    for record in records:
        if len(selected) >= disclosure.max_count:
            break
        if classify(record, predicate, reference):
            selected.append(redact_record(record, disclosure))
    return selected
