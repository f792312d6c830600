"""Pricing analytics endpoint.

- GET /api/analytics - Per-category demand over the last 24 hours

Routes mounted at: /api/analytics
"""

from __future__ import annotations

__all__ = ["router"]

from fastapi import APIRouter

from dataguard.api.deps import ServiceDep
from dataguard.api.schemas import CategoryAnalyticsResponse

router = APIRouter()


@router.get("")
def get_analytics(service: ServiceDep) -> dict[str, CategoryAnalyticsResponse]:
    return {
        category: CategoryAnalyticsResponse.model_validate(stats)
        for category, stats in service.analytics().items()
    }
