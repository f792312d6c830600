"""Tagged message endpoint.

- POST /api/messages - Handle one {"type": ...} message

Expected failures come back as {"success": false, ...} with status 200;
only an unparseable body is rejected by the framework.

Routes mounted at: /api/messages
"""

from __future__ import annotations

__all__ = ["router"]

from typing import Any

from fastapi import APIRouter, Body

from dataguard.api.deps import ServiceDep
from dataguard.messages import MessageResponse, dispatch

router = APIRouter()


@router.post("")
def handle_message(service: ServiceDep, payload: dict[str, Any] = Body(...)) -> MessageResponse:
    return dispatch(service, payload)
