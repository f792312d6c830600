"""Shared dependencies for API routes.

Usage with Annotated:
    from dataguard.api.deps import ServiceDep

    @router.get("")
    def get_history(service: ServiceDep) -> list[LedgerEntryResponse]:
        ...
"""

from __future__ import annotations

__all__ = [
    "ServiceDep",
    "get_service",
]

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from dataguard.service import DataGuardService


def get_service(request: Request) -> DataGuardService:
    """Get the DataGuardService registered on app.state.

    Raises:
        HTTPException: 503 if no service is registered.
    """
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="DataGuard service not available")
    return service


# Resolved at import time so routes using postponed annotations can evaluate it
ServiceDep = Annotated[DataGuardService, Depends(get_service)]
