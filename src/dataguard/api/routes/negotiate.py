"""Negotiation API endpoints.

- POST /api/negotiate        - Decide on a request (denials are 200 results)
- POST /api/negotiate/quote  - Price a request without recording it

Routes mounted at: /api/negotiate
"""

from __future__ import annotations

__all__ = ["router"]

from fastapi import APIRouter

from dataguard.api.deps import ServiceDep
from dataguard.api.schemas import QuoteResponse
from dataguard.context import NegotiationRequest
from dataguard.payments import format_price
from dataguard.pdp.decision import NegotiationResult

router = APIRouter()


@router.post("")
def negotiate(request: NegotiationRequest, service: ServiceDep) -> NegotiationResult:
    """Negotiate a request under the current policy.

    Every call is recorded in the ledger, accepted or not.
    """
    return service.negotiate(request)


@router.post("/quote")
def quote(request: NegotiationRequest, service: ServiceDep) -> QuoteResponse:
    """Quote a request at current demand. Nothing is recorded."""
    result = service.quote(request)
    return QuoteResponse(
        category=request.category,
        base_price=result.base_price,
        demand_multiplier=result.demand_multiplier,
        privacy_multiplier=result.privacy_multiplier,
        volume_multiplier=result.volume_multiplier,
        price=result.price,
        formatted=format_price(result.price),
    )
