"""Policy model for data-sharing negotiation.

This module defines the single user-owned policy read by every negotiation.

Policy structure:
    Policy
    ├── global_data_sharing: master switch
    ├── allow_<category>_proof: per-category switches
    ├── redact_email_bodies / redact_personal_info: privacy flags
    ├── show_sender_info / show_subject_info: field visibility
    ├── pricing: PricingConfig (base price per category)
    ├── max_email_age / max_emails_per_request: ceilings
    ├── wallet_address / facilitator_url / network: payment identity
    └── version / last_updated: metadata

Design principles:
1. Policy is frozen. Updates replace the whole object (no partial mutation
   is ever visible to a concurrent negotiation).
2. Closed world: unknown categories are never allowed.
3. A non-positive base price means "pricing unset", never "free".
"""

from __future__ import annotations

__all__ = [
    "PricingConfig",
    "Policy",
    "create_default_policy",
]

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from dataguard.constants import DEFAULT_BASE_PRICES, INITIAL_VERSION, Network


class PricingConfig(BaseModel):
    """Base price per category in USDC.

    Values are not range-checked. A price that is not positive, or too small
    to quote above 0.000, makes negotiation deny that category as
    "pricing unset".
    """

    subscription: float = DEFAULT_BASE_PRICES["subscription"]
    delivery: float = DEFAULT_BASE_PRICES["delivery"]
    purchase: float = DEFAULT_BASE_PRICES["purchase"]
    financial: float = DEFAULT_BASE_PRICES["financial"]

    model_config = ConfigDict(frozen=True, extra="forbid")

    def for_category(self, category: str) -> float | None:
        """Get the configured base price, or None for unknown categories."""
        if category not in DEFAULT_BASE_PRICES:
            return None
        return getattr(self, category)


class Policy(BaseModel):
    """Complete user policy.

    Attributes:
        global_data_sharing: Master switch; False denies every category.
        allow_subscription_proof: Allow subscription predicates.
        allow_delivery_proof: Allow delivery predicates.
        allow_purchase_proof: Allow purchase predicates.
        allow_financial_proof: Allow financial predicates.
        redact_email_bodies: Bodies are never disclosed.
        redact_personal_info: Personal info is never disclosed.
        show_sender_info: Disclose the sender field.
        show_subject_info: Disclose the subject field.
        pricing: Base prices per category.
        max_email_age: Ceiling on record age in days.
        max_emails_per_request: Ceiling on records per request.
        wallet_address: Payout address (0x + 40 hex).
        facilitator_url: Payment facilitator endpoint.
        network: Settlement network.
        version: Policy version ("v1", "v2", ...).
        last_updated: When the policy was last replaced.
    """

    # Global settings
    global_data_sharing: bool = True

    # Predicate permissions
    allow_subscription_proof: bool = True
    allow_delivery_proof: bool = True
    allow_purchase_proof: bool = False
    allow_financial_proof: bool = False

    # Privacy settings
    redact_email_bodies: bool = True
    redact_personal_info: bool = True
    show_sender_info: bool = True
    show_subject_info: bool = True

    # Pricing
    pricing: PricingConfig = Field(default_factory=PricingConfig)

    # Ceilings
    max_email_age: int = Field(default=90, ge=0)
    max_emails_per_request: int = Field(default=10, ge=0)

    # Payment configuration
    wallet_address: str = ""
    facilitator_url: str = "https://x402.org/facilitator"
    network: Network = "polygon"

    # Metadata
    version: str = INITIAL_VERSION
    last_updated: datetime | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")


def create_default_policy() -> Policy:
    """Create the default policy.

    Returns:
        Policy sharing subscription and delivery proofs only, with
        bodies and personal info redacted and no wallet configured.
    """
    return Policy()
