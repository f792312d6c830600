"""Transaction ledger for negotiation attempts.

Records every negotiation (accepted or denied) for two consumers:
- Demand statistics: per-category ring buffers feed the demand multiplier
- Audit display: a global ring buffer feeds user-facing history

Both buffers are bounded deques: appending past capacity evicts the
oldest entry (FIFO, O(1)).

Concurrency: appends and reads are serialized by a single lock, so
concurrent negotiations never lose entries or reorder eviction. Readers
get snapshots (lists), never live views.

Counting is an exact linear scan over at most demand_capacity entries.
Entries need not arrive in timestamp order (callers may supply their own
request timestamps), so no early exit is taken.
"""

from __future__ import annotations

__all__ = [
    "CategoryAnalytics",
    "LedgerEntry",
    "TransactionLedger",
]

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal

from dataguard.constants import (
    ANALYTICS_WINDOW_SECONDS,
    DEFAULT_BASE_PRICES,
    DEFAULT_DEMAND_CAPACITY,
    DEFAULT_HISTORY_CAPACITY,
    HIGH_DEMAND_THRESHOLD,
)
from dataguard.utils.clock import Clock, utc_now


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """One negotiation attempt.

    Attributes:
        category: Requested category.
        timestamp: When the request was made.
        accepted: Whether it was accepted.
        price: Price charged (0.0 when denied).
        record_count: Records licensed by the negotiated terms (0 when denied).
        requester_id: Who asked.
        reason: Denial reason, if denied.
    """

    category: str
    timestamp: datetime
    accepted: bool
    price: float
    record_count: int
    requester_id: str | None = None
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class CategoryAnalytics:
    """Demand summary for one category.

    Attributes:
        request_count: Requests in the analytics window.
        accepted_count: Accepted requests in the analytics window.
        average_price: Default base price for the category.
        demand_level: "high" above HIGH_DEMAND_THRESHOLD requests.
    """

    request_count: int
    accepted_count: int
    average_price: float
    demand_level: Literal["normal", "high"]


class TransactionLedger:
    """Bounded, append-only record of negotiation attempts.

    Attributes:
        demand_capacity: Max entries kept per category.
        history_capacity: Max entries kept in global history.
    """

    def __init__(
        self,
        demand_capacity: int = DEFAULT_DEMAND_CAPACITY,
        history_capacity: int = DEFAULT_HISTORY_CAPACITY,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the ledger.

        Args:
            demand_capacity: Per-category cap for demand statistics.
            history_capacity: Global cap for user-facing history.
            clock: Source of "now" for windowed queries.

        Raises:
            ValueError: If a capacity is not positive.
        """
        if demand_capacity <= 0 or history_capacity <= 0:
            raise ValueError("Ledger capacities must be positive")
        self._demand_capacity = demand_capacity
        self._history_capacity = history_capacity
        self._clock = clock
        self._by_category: dict[str, deque[LedgerEntry]] = {}
        self._history: deque[LedgerEntry] = deque(maxlen=history_capacity)
        self._lock = threading.Lock()

    @property
    def demand_capacity(self) -> int:
        return self._demand_capacity

    @property
    def history_capacity(self) -> int:
        return self._history_capacity

    def record(self, entry: LedgerEntry) -> None:
        """Append an entry, evicting the oldest past capacity.

        Args:
            entry: Entry to append.
        """
        with self._lock:
            window = self._by_category.get(entry.category)
            if window is None:
                window = deque(maxlen=self._demand_capacity)
                self._by_category[entry.category] = window
            window.append(entry)
            self._history.append(entry)

    def recent_count(
        self,
        category: str,
        window_seconds: float,
        now: datetime | None = None,
    ) -> int:
        """Count same-category entries strictly newer than now - window.

        Args:
            category: Category to count.
            window_seconds: Trailing window length.
            now: Reference time. Defaults to the ledger clock.

        Returns:
            Number of entries in the window.
        """
        reference = now if now is not None else self._clock()
        cutoff = reference - timedelta(seconds=window_seconds)
        with self._lock:
            window = self._by_category.get(category)
            if not window:
                return 0
            return sum(1 for entry in window if entry.timestamp > cutoff)

    def history(self, limit: int | None = None) -> list[LedgerEntry]:
        """Get recent entries across all categories, newest first.

        Args:
            limit: Max entries to return. None returns everything kept.

        Returns:
            Snapshot list of entries.
        """
        with self._lock:
            entries = list(reversed(self._history))
        if limit is not None:
            entries = entries[: max(limit, 0)]
        return entries

    def entries(self, category: str) -> list[LedgerEntry]:
        """Get the demand buffer for one category, oldest first."""
        with self._lock:
            return list(self._by_category.get(category, ()))

    def analytics(self, now: datetime | None = None) -> dict[str, CategoryAnalytics]:
        """Summarize demand per category over the last 24 hours.

        Args:
            now: Reference time. Defaults to the ledger clock.

        Returns:
            Mapping of category to its analytics. Categories never
            requested are omitted.
        """
        reference = now if now is not None else self._clock()
        cutoff = reference - timedelta(seconds=ANALYTICS_WINDOW_SECONDS)
        with self._lock:
            snapshot = {category: list(window) for category, window in self._by_category.items()}

        result: dict[str, CategoryAnalytics] = {}
        for category, entries in snapshot.items():
            recent = [entry for entry in entries if entry.timestamp > cutoff]
            result[category] = CategoryAnalytics(
                request_count=len(recent),
                accepted_count=sum(1 for entry in recent if entry.accepted),
                average_price=DEFAULT_BASE_PRICES.get(category, 0.0),
                demand_level="high" if len(recent) > HIGH_DEMAND_THRESHOLD else "normal",
            )
        return result

    def clear(self) -> int:
        """Clear all entries.

        Returns:
            Number of history entries cleared.
        """
        with self._lock:
            count = len(self._history)
            self._by_category.clear()
            self._history.clear()
        return count

    @property
    def count(self) -> int:
        """Number of entries in global history."""
        with self._lock:
            return len(self._history)
