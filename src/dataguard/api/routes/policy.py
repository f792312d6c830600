"""Policy API endpoints.

- GET   /api/policy  - Read current policy
- PUT   /api/policy  - Replace entire policy
- PATCH /api/policy  - Update selected fields

Every write bumps the version (v1 → v2 → ...) and stamps last_updated.

Routes mounted at: /api/policy
"""

from __future__ import annotations

__all__ = ["router"]

from typing import Any

from fastapi import APIRouter, Body

from dataguard.api.deps import ServiceDep
from dataguard.pdp.policy import Policy

router = APIRouter()


@router.get("")
def get_policy(service: ServiceDep) -> Policy:
    return service.get_policy()


@router.put("")
def replace_policy(policy: Policy, service: ServiceDep) -> Policy:
    """Replace the whole policy. Client-supplied version metadata is ignored."""
    return service.update_policy(policy)


@router.patch("")
def patch_policy(service: ServiceDep, changes: dict[str, Any] = Body(...)) -> Policy:
    """Merge fields into the current policy and re-validate the result."""
    return service.patch_policy(changes)
