"""Ledger history endpoint.

- GET /api/history?limit=N - Recent negotiation attempts, newest first

Routes mounted at: /api/history
"""

from __future__ import annotations

__all__ = ["router"]

from fastapi import APIRouter, Query

from dataguard.api.deps import ServiceDep
from dataguard.api.schemas import LedgerEntryResponse

router = APIRouter()


@router.get("")
def get_history(
    service: ServiceDep,
    limit: int | None = Query(default=None, ge=0),
) -> list[LedgerEntryResponse]:
    return [LedgerEntryResponse.model_validate(entry) for entry in service.history(limit)]
