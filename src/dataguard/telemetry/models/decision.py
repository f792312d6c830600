"""Pydantic models for negotiation audit logs (audit/decisions.jsonl).

The 'time' field is Optional[str] = None because ISO8601Formatter adds the
timestamp during log serialization. Logged events always carry it.
"""

from __future__ import annotations

__all__ = [
    "NegotiationEvent",
    "PriceFactors",
]

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class PriceFactors(BaseModel):
    """Multipliers behind a quoted price."""

    base_price: float
    demand: float
    privacy: float
    volume: float

    model_config = ConfigDict(frozen=True)


class NegotiationEvent(BaseModel):
    """One negotiation outcome, as written to decisions.jsonl.

    Denials before pricing (sharing or category disabled, pricing unset)
    have no price or factors.
    """

    time: Optional[str] = None

    decision: Literal["accept", "deny"]
    category: str
    requester_id: str
    requester_type: str

    # Requested terms
    requested_max_age: int
    requested_max_emails: int
    include_bodies: bool
    include_personal_info: bool

    # Outcome
    price: Optional[float] = None
    factors: Optional[PriceFactors] = None
    granted_max_age: Optional[int] = None
    granted_max_count: Optional[int] = None
    reason: Optional[str] = None
    denial_code: Optional[str] = None
    counter_offer_price: Optional[float] = None
    conditions: Optional[list[str]] = None

    policy_version: str
    eval_ms: float

    model_config = ConfigDict(frozen=True)
