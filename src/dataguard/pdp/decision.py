"""Negotiation outcome types.

These values define the possible outcomes of a negotiation, used by the
engine to communicate decisions to the enforcement side and to callers.
"""

from __future__ import annotations

__all__ = [
    "AdjustedPolicy",
    "CounterOffer",
    "Decision",
    "DenialCode",
    "NegotiationResult",
]

from enum import Enum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dataguard.exceptions import ConfigurationError, PolicyDeniedError


class Decision(str, Enum):
    """Negotiation decision outcome.

    Inherits from str for easy serialization and comparison.

    Attributes:
        ACCEPT: Request admitted at the quoted price.
        DENY: Request refused (possibly with a counter-offer).
    """

    ACCEPT = "accept"
    DENY = "deny"


class DenialCode(str, Enum):
    """Why a negotiation was denied.

    GLOBAL_SHARING_DISABLED, CATEGORY_DISABLED and PRIVACY_CONFLICT are
    policy outcomes. PRICING_UNSET and INVALID_PAYMENT_CONFIG are
    configuration problems the user fixes in their policy.
    """

    GLOBAL_SHARING_DISABLED = "global_sharing_disabled"
    CATEGORY_DISABLED = "category_disabled"
    PRICING_UNSET = "pricing_unset"
    PRIVACY_CONFLICT = "privacy_conflict"
    INVALID_PAYMENT_CONFIG = "invalid_payment_config"

    @property
    def is_configuration_error(self) -> bool:
        return self in (DenialCode.PRICING_UNSET, DenialCode.INVALID_PAYMENT_CONFIG)


class CounterOffer(BaseModel):
    """Terms the engine would accept instead.

    Attributes:
        price: Quoted price for the original request.
        conditions: Conditions the requester must accept.
    """

    price: float = Field(ge=0)
    conditions: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class AdjustedPolicy(BaseModel):
    """Effective terms for an accepted transaction.

    Never looser than the base policy: ages and counts are the minimum of
    requested and allowed, redaction flags are set if either side wants them.
    """

    max_age: int = Field(ge=0)
    max_count: int = Field(ge=0)
    redact_bodies: bool
    redact_personal_info: bool

    model_config = ConfigDict(frozen=True)


class NegotiationResult(BaseModel):
    """Outcome of one negotiation.

    Attributes:
        accepted: Whether the request was admitted.
        final_price: Price charged (accepted only).
        adjusted_policy: Effective terms (accepted only).
        reason: Denial reason (denied only).
        denial_code: Machine-readable denial cause (denied only).
        counter_offer: Alternative terms (privacy conflicts only).
        conditions: Advisory notes attached on acceptance, e.g. when the
            request exceeded a policy ceiling and was clamped.
    """

    accepted: bool
    final_price: float | None = Field(default=None, ge=0)
    adjusted_policy: AdjustedPolicy | None = None
    reason: str | None = None
    denial_code: DenialCode | None = None
    counter_offer: CounterOffer | None = None
    conditions: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_shape(self) -> Self:
        """Accepted results carry price and terms; denials carry a reason."""
        if self.accepted:
            if self.final_price is None or self.adjusted_policy is None:
                raise ValueError("accepted result requires final_price and adjusted_policy")
            if self.reason is not None or self.counter_offer is not None:
                raise ValueError("accepted result cannot carry a denial reason or counter-offer")
        elif self.reason is None or self.denial_code is None:
            raise ValueError("denied result requires reason and denial_code")
        return self

    @property
    def decision(self) -> Decision:
        return Decision.ACCEPT if self.accepted else Decision.DENY

    @classmethod
    def deny(
        cls,
        code: DenialCode,
        reason: str,
        counter_offer: CounterOffer | None = None,
    ) -> "NegotiationResult":
        """Build a denial."""
        return cls(accepted=False, denial_code=code, reason=reason, counter_offer=counter_offer)

    def raise_for_denial(self, category: str | None = None) -> None:
        """Raise the matching exception if this result is a denial.

        Args:
            category: Requested category, for error context.

        Raises:
            ConfigurationError: Pricing or payment configuration is invalid.
            PolicyDeniedError: Any other denial.
        """
        if self.accepted:
            return
        assert self.reason is not None and self.denial_code is not None
        if self.denial_code.is_configuration_error:
            raise ConfigurationError(self.reason)
        raise PolicyDeniedError(self.reason, category=category, counter_offer=self.counter_offer)
