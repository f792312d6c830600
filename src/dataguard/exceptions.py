"""Custom exceptions for dataguard.

This module contains all custom exceptions used throughout the package.
Exceptions are organized into two categories:

Expected Outcomes (not faults):
    - PolicyDeniedError: Negotiation denied by the user's policy

Failures (caller must act):
    - ConfigurationError: Wallet, pricing or config file is invalid
    - UpstreamFetchError: The record data source failed
    - RequestValidationError: Malformed request, rejected at the boundary
    - PolicyNotFoundError: Policy store has no policy yet

No error is retried inside the engine. Retry policy belongs to the caller.

Usage:
    from dataguard.exceptions import PolicyDeniedError, UpstreamFetchError
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "DataGuardError",
    "PolicyDeniedError",
    "PolicyNotFoundError",
    "RequestValidationError",
    "UpstreamFetchError",
]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pydantic import ValidationError

    from dataguard.pdp.decision import CounterOffer


class DataGuardError(Exception):
    """Base exception for all dataguard errors.

    Attributes:
        message: Human-readable description.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Expected Outcomes
# =============================================================================


class PolicyDeniedError(DataGuardError):
    """Raised when a negotiation is denied by policy.

    This is an expected, recoverable outcome. The requester may submit
    a new request, for example one that accepts the counter-offer.

    Attributes:
        reason: Human-readable denial reason.
        category: Requested category.
        counter_offer: Optional counter-offer (price + conditions).
    """

    def __init__(
        self,
        reason: str,
        *,
        category: str | None = None,
        counter_offer: "CounterOffer | None" = None,
    ) -> None:
        """Initialize PolicyDeniedError.

        Args:
            reason: Human-readable denial reason.
            category: Requested category.
            counter_offer: Counter-offer the requester may accept instead.
        """
        super().__init__(reason)
        self.reason = reason
        self.category = category
        self.counter_offer = counter_offer

    def to_dict(self) -> dict[str, Any]:
        """Structured data for API error responses."""
        data: dict[str, Any] = {"reason": self.reason}
        if self.category is not None:
            data["category"] = self.category
        if self.counter_offer is not None:
            data["counter_offer"] = self.counter_offer.model_dump(mode="json")
        return data

    def __repr__(self) -> str:
        parts = [f"PolicyDeniedError({self.reason!r}"]
        if self.category is not None:
            parts.append(f", category={self.category!r}")
        if self.counter_offer is not None:
            parts.append(f", counter_offer={self.counter_offer!r}")
        parts.append(")")
        return "".join(parts)


# =============================================================================
# Failures
# =============================================================================


class ConfigurationError(DataGuardError):
    """Configuration is invalid or incomplete.

    Raised when:
    - Wallet address is missing or not a 0x-prefixed 40-hex address
    - A category's base price is zero or negative (pricing unset)
    - Config file fails validation

    Never silently defaulted to a zero price.
    """


class UpstreamFetchError(DataGuardError):
    """The record data source failed.

    Propagated as a distinguishable failure. Never merged into
    "zero matching records", which would misrepresent an outage as "no data".

    Attributes:
        category: Category being fetched.
        status_code: HTTP status code, if the source answered.
    """

    def __init__(
        self,
        message: str,
        *,
        category: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.status_code = status_code


class RequestValidationError(DataGuardError):
    """Malformed request rejected before touching policy or ledger state.

    Attributes:
        errors: Field-level errors as {"loc", "msg", "type"} dicts.
    """

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, exc: "ValidationError", what: str = "request") -> "RequestValidationError":
        """Build from a pydantic ValidationError.

        Args:
            exc: The pydantic error.
            what: Noun for the message (e.g., "request", "message").

        Returns:
            RequestValidationError with field-level details.
        """
        errors = [
            {"loc": list(err.get("loc", [])), "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        lines = [f"  - {'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in errors]
        return cls(f"Invalid {what}:\n" + "\n".join(lines), errors)


class PolicyNotFoundError(DataGuardError):
    """The policy store holds no policy."""
