"""API response schemas.

Engine-side value types (LedgerEntry, CategoryAnalytics, PriceQuote,
PredicateOutcome) are plain dataclasses; these models are their wire shape.
Request bodies reuse the context models directly (NegotiationRequest,
Predicate, Policy).
"""

from __future__ import annotations

__all__ = [
    "CategoryAnalyticsResponse",
    "LedgerEntryResponse",
    "PredicateOutcomeResponse",
    "QuoteResponse",
]

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class QuoteResponse(BaseModel):
    """Price breakdown for a request at current demand."""

    category: str
    base_price: float
    demand_multiplier: float
    privacy_multiplier: float
    volume_multiplier: float
    price: float
    formatted: str


class LedgerEntryResponse(BaseModel):
    """One recorded negotiation attempt."""

    category: str
    timestamp: datetime
    accepted: bool
    price: float
    record_count: int
    requester_id: str | None = None
    reason: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CategoryAnalyticsResponse(BaseModel):
    """Demand summary for one category over the last 24 hours."""

    request_count: int
    accepted_count: int
    average_price: float
    demand_level: Literal["normal", "high"]

    model_config = ConfigDict(from_attributes=True)


class PredicateOutcomeResponse(BaseModel):
    """Match count for a predicate and whether its minimum is met."""

    category: str
    match_count: int
    required: int
    satisfied: bool

    model_config = ConfigDict(from_attributes=True)
