"""Pricing engine - deterministic multiplicative quotes.

Quote formula (order of multiplication is fixed for reproducibility):

    price = round(base × demand × privacy × volume, 3)

Where:
- demand  = min(1 + recent_requests × 0.1, 2.0)
    recent_requests: same-category requests in the trailing hour
- privacy = 1.0 + 0.5 (bodies requested) + 0.3 (personal info requested)
- volume  = 1.0 if requested records ≤ 10,
            else min(1 + ((requested - 10) / 10) × 0.2, 2.0)

Example quotes:
- delivery (0.10), nothing extra                    → 0.100
- delivery (0.10), bodies                           → 0.150
- subscription (0.05), 20 records                   → 0.060
- purchase (0.25), 15 recent requests               → 0.500

Rounding is half-up at the third decimal, so 0.0005 rounds to 0.001. A
quote that rounds to 0.000 is "pricing unset", never a free grant.

Every multiplier is ≥ 1.0 and non-decreasing in its input, so asking for
more (records, bodies, personal info) never lowers the price.
"""

from __future__ import annotations

__all__ = [
    "PriceQuote",
    "demand_multiplier",
    "privacy_multiplier",
    "quote",
    "resolve_base_price",
    "round_price",
    "volume_multiplier",
]

import logging
import math
from dataclasses import dataclass

from dataguard.constants import (
    BODY_PRIVACY_SURCHARGE,
    DEMAND_CAP,
    DEMAND_STEP,
    PERSONAL_INFO_PRIVACY_SURCHARGE,
    PRICE_DECIMALS,
    VOLUME_BASELINE,
    VOLUME_CAP,
    VOLUME_STEP,
)
from dataguard.context import NegotiationRequest, RequestedData
from dataguard.exceptions import ConfigurationError
from dataguard.pdp.policy import Policy

logger = logging.getLogger(__name__)

_SCALE = 10**PRICE_DECIMALS


@dataclass(frozen=True, slots=True)
class PriceQuote:
    """A computed quote with its factors, for display and audit.

    Attributes:
        base_price: Configured base price for the category.
        demand_multiplier: Factor from recent same-category demand.
        privacy_multiplier: Factor from requested detail level.
        volume_multiplier: Factor from requested record count.
        price: Final rounded price.
    """

    base_price: float
    demand_multiplier: float
    privacy_multiplier: float
    volume_multiplier: float
    price: float


def round_price(value: float) -> float:
    """Round half-up to PRICE_DECIMALS places.

    Python's round() is half-to-even, which would price 0.0625 at 0.062.
    """
    return math.floor(value * _SCALE + 0.5) / _SCALE


def demand_multiplier(recent_request_count: int) -> float:
    """Scale with same-category demand in the trailing window, capped at 2x."""
    return min(1 + max(recent_request_count, 0) * DEMAND_STEP, DEMAND_CAP)


def privacy_multiplier(requested: RequestedData) -> float:
    """Surcharge for bodies and personal info (additive inside the factor)."""
    multiplier = 1.0
    if requested.include_bodies:
        multiplier += BODY_PRIVACY_SURCHARGE
    if requested.include_personal_info:
        multiplier += PERSONAL_INFO_PRIVACY_SURCHARGE
    return multiplier


def volume_multiplier(requested_records: int) -> float:
    """Graduated pricing above the first VOLUME_BASELINE records, capped at 2x."""
    if requested_records <= VOLUME_BASELINE:
        return 1.0
    extra = (requested_records - VOLUME_BASELINE) / VOLUME_BASELINE
    return min(1 + extra * VOLUME_STEP, VOLUME_CAP)


def resolve_base_price(category: str, policy: Policy) -> float:
    """Get the base price for a category from the policy.

    Args:
        category: Requested category.
        policy: Policy snapshot.

    Returns:
        Positive base price.

    Raises:
        ConfigurationError: If the category has no positive price.
    """
    base = policy.pricing.for_category(category)
    if base is None or base <= 0:
        raise ConfigurationError(f"pricing unset for {category}")
    return base


def quote(request: NegotiationRequest, base_price: float, recent_request_count: int) -> PriceQuote:
    """Compute the price for a request.

    Args:
        request: Validated negotiation request.
        base_price: Base price for the category (must be positive).
        recent_request_count: Same-category requests in the demand window.

    Returns:
        PriceQuote with the individual factors and the rounded price.

    Raises:
        ConfigurationError: If base_price is zero or negative, or the
            rounded price is zero.
    """
    if base_price <= 0:
        raise ConfigurationError(f"pricing unset for {request.category}")

    demand = demand_multiplier(recent_request_count)
    privacy = privacy_multiplier(request.requested_data)
    volume = volume_multiplier(request.requested_data.max_emails)

    price = base_price
    price *= demand
    price *= privacy
    price *= volume
    price = round_price(price)
    if price <= 0:
        raise ConfigurationError(f"pricing unset for {request.category}: price rounds to zero")

    logger.debug(
        "Quoted %s: base=%s demand=%s privacy=%s volume=%s price=%s",
        request.category,
        base_price,
        demand,
        privacy,
        volume,
        price,
    )
    return PriceQuote(
        base_price=base_price,
        demand_multiplier=demand,
        privacy_multiplier=privacy,
        volume_multiplier=volume,
        price=price,
    )
