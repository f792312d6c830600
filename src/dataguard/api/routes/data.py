"""Data API endpoints.

- POST /api/data           - Negotiate and disclose redacted records
- POST /api/data/evaluate  - Count records matching a predicate

Denials surface as 403 (POLICY_DENIED) or 409 (CONFIGURATION_INVALID);
record source failures as 502 (UPSTREAM_ERROR).

Routes mounted at: /api/data
"""

from __future__ import annotations

__all__ = ["router"]

from fastapi import APIRouter

from dataguard.api.deps import ServiceDep
from dataguard.api.schemas import PredicateOutcomeResponse
from dataguard.context import NegotiationRequest, Predicate
from dataguard.service import DataResponse

router = APIRouter()


@router.post("")
def request_data(request: NegotiationRequest, service: ServiceDep) -> DataResponse:
    """Negotiate, then return the disclosed view of matching records."""
    return service.request_data(request)


@router.post("/evaluate")
def evaluate(predicate: Predicate, service: ServiceDep) -> PredicateOutcomeResponse:
    """Evaluate a predicate against the record source."""
    return PredicateOutcomeResponse.model_validate(service.evaluate(predicate))
