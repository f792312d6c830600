"""Injectable clock.

Anything that compares stored timestamps against "now" takes a Clock so
tests can control time deterministically.
"""

from __future__ import annotations

__all__ = ["Clock", "utc_now"]

from collections.abc import Callable
from datetime import datetime, timezone

# Zero-argument callable returning a timezone-aware datetime
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(timezone.utc)
