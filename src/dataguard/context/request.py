"""Request models - predicates and negotiation requests.

Both are validated at the boundary: unknown categories and negative
ages or counts are rejected before any policy or ledger access.
"""

from __future__ import annotations

__all__ = [
    "NegotiationRequest",
    "Predicate",
    "RequestedData",
    "RequesterType",
    "parse_request",
]

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dataguard.constants import Category
from dataguard.context.record import _as_utc
from dataguard.exceptions import RequestValidationError

RequesterType = Literal["human", "ai-agent", "third-party-app"]


class Predicate(BaseModel):
    """Declarative question about the inbox.

    "Does the inbox contain records of this category within max_age days?"

    Attributes:
        category: One of the recognized categories.
        max_age: Maximum record age in days.
        min_count: Minimum number of matching records for the predicate
            to hold (None means at least one).
        keywords: Optional override for the category keyword table,
            matched against subject and sender.
    """

    category: Category
    max_age: int = Field(ge=0)
    min_count: int | None = Field(default=None, ge=0)
    keywords: tuple[str, ...] | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("keywords", mode="after")
    @classmethod
    def reject_empty_keywords(cls, v: tuple[str, ...] | None) -> tuple[str, ...] | None:
        """Empty keywords would match every record."""
        if v is None:
            return v
        if not v:
            raise ValueError("keywords override cannot be an empty list")
        for item in v:
            if not item.strip():
                raise ValueError("keywords cannot contain empty or whitespace-only strings")
        return v


class RequestedData(BaseModel):
    """What the requester wants disclosed.

    Attributes:
        max_age: Freshness in days.
        max_emails: Volume (number of records).
        include_bodies: Whether full bodies are requested.
        include_personal_info: Whether personal info is requested.
    """

    max_age: int = Field(ge=0)
    max_emails: int = Field(ge=0)
    include_bodies: bool = False
    include_personal_info: bool = False

    model_config = ConfigDict(frozen=True)


class NegotiationRequest(BaseModel):
    """Inbound request for data, input to the negotiation engine.

    Attributes:
        category: Requested category.
        requester_id: Requester identity.
        requester_type: Requester class.
        requested_data: Freshness, volume and detail parameters.
        timestamp: When the request was made (UTC; naive values are taken
            as UTC). Stamped by the engine's clock if omitted.
    """

    category: Category
    requester_id: str = Field(default="anonymous", min_length=1)
    requester_type: RequesterType = "ai-agent"
    requested_data: RequestedData
    timestamp: datetime | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("timestamp", mode="after")
    @classmethod
    def ensure_timezone(cls, v: datetime | None) -> datetime | None:
        """Naive timestamps are UTC; the ledger compares them with aware cutoffs."""
        return None if v is None else _as_utc(v)

    def to_predicate(self, max_age: int | None = None) -> Predicate:
        """Build the classifier predicate for this request.

        Args:
            max_age: Negotiated age ceiling. Defaults to the requested age.

        Returns:
            Predicate for the requested category.
        """
        return Predicate(
            category=self.category,
            max_age=self.requested_data.max_age if max_age is None else max_age,
        )


def parse_request(data: dict[str, Any]) -> NegotiationRequest:
    """Validate a raw request payload.

    Args:
        data: Untrusted request payload.

    Returns:
        Validated NegotiationRequest.

    Raises:
        RequestValidationError: If the payload is malformed.
    """
    try:
        return NegotiationRequest.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError.from_pydantic(e, "negotiation request") from e
