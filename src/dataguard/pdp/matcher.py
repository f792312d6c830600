"""Predicate classifier - decide whether a record satisfies a predicate.

Matching for a record against a predicate:
1. Age filter: the record must be no older than predicate.max_age days.
   An old record is rejected regardless of category.
2. Pre-tagged category equal to the predicate category -> match.
3. Keyword/sender heuristics from the category table (or the predicate's
   keyword override) -> match.
4. Otherwise -> no match.

Design note: keyword matching is a HEURISTIC. Subjects and senders are
written by third parties and may be misleading. The classifier decides what
is disclosed, never what is charged, so a false positive only ever means a
redacted record is shown.

All functions are pure: deterministic given identical inputs and "now".
"""

from __future__ import annotations

__all__ = [
    "PredicateOutcome",
    "classify",
    "evaluate_predicate",
    "is_within_age",
    "matches_category",
]

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from dataguard.constants import SENDER_KEYWORDS, SUBJECT_KEYWORDS, SUBJECT_OR_SENDER_KEYWORDS
from dataguard.context import Predicate, Record
from dataguard.utils.clock import utc_now


def _contains_any(haystack: str, needles: Iterable[str]) -> bool:
    """Case-insensitive substring match against any needle."""
    lowered = haystack.lower()
    return any(needle.lower() in lowered for needle in needles)


def is_within_age(record: Record, max_age_days: int, now: datetime) -> bool:
    """Check the record is no older than max_age_days.

    Records exactly at the cutoff are kept. Records dated in the future
    are kept (clock skew on the sender side is common).

    Args:
        record: Record to check.
        max_age_days: Maximum age in days.
        now: Reference time (timezone-aware).

    Returns:
        True if the record is recent enough.
    """
    cutoff = now - timedelta(days=max_age_days)
    return record.timestamp >= cutoff


def matches_category(record: Record, predicate: Predicate) -> bool:
    """Apply tag and keyword matching (no age filter).

    Args:
        record: Record to check.
        predicate: Predicate with category and optional keyword override.

    Returns:
        True if the record belongs to the predicate's category.
    """
    # Explicit tag from the source short-circuits
    if record.category is not None and record.category == predicate.category:
        return True

    if predicate.keywords is not None:
        return _contains_any(record.subject, predicate.keywords) or _contains_any(
            record.sender, predicate.keywords
        )

    category = predicate.category
    if _contains_any(record.subject, SUBJECT_KEYWORDS[category]):
        return True
    both = SUBJECT_OR_SENDER_KEYWORDS[category]
    if _contains_any(record.subject, both) or _contains_any(record.sender, both):
        return True
    return _contains_any(record.sender, SENDER_KEYWORDS[category])


def classify(record: Record, predicate: Predicate, now: datetime | None = None) -> bool:
    """Decide whether a record satisfies a predicate.

    The age filter dominates: an old record never matches.

    Args:
        record: Record to classify.
        predicate: Predicate to test.
        now: Reference time. Defaults to the current UTC time.

    Returns:
        True if the record satisfies the predicate.
    """
    reference = now if now is not None else utc_now()
    if not is_within_age(record, predicate.max_age, reference):
        return False
    return matches_category(record, predicate)


@dataclass(frozen=True, slots=True)
class PredicateOutcome:
    """Answer to a predicate over a record set.

    Attributes:
        category: Predicate category.
        match_count: Number of matching records.
        required: Minimum count for the predicate to hold.
        satisfied: Whether match_count >= required.
    """

    category: str
    match_count: int
    required: int
    satisfied: bool


def evaluate_predicate(
    records: Sequence[Record],
    predicate: Predicate,
    now: datetime | None = None,
) -> PredicateOutcome:
    """Answer "does the inbox contain enough matching records?".

    This is the input an external proof service commits to. It never
    exposes the records themselves.

    Args:
        records: Candidate records.
        predicate: Predicate to test.
        now: Reference time. Defaults to the current UTC time.

    Returns:
        PredicateOutcome with the match count.
    """
    reference = now if now is not None else utc_now()
    count = sum(1 for record in records if classify(record, predicate, reference))
    required = predicate.min_count if predicate.min_count is not None else 1
    return PredicateOutcome(
        category=predicate.category,
        match_count=count,
        required=required,
        satisfied=count >= required,
    )
