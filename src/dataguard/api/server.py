"""FastAPI server for the dataguard HTTP API.

Endpoints:
- /api/negotiate  - negotiate and quote
- /api/data       - negotiate and disclose records, evaluate predicates
- /api/policy     - read/replace/patch the policy
- /api/history    - ledger history
- /api/analytics  - demand analytics
- /api/messages   - tagged message dispatch

Routes are sync; FastAPI runs them in its threadpool, so a slow record
source never blocks the event loop.

Usage:
    dataguard serve

or, with a service built elsewhere:
    app = create_api_app(service)
    uvicorn.run(app, host="127.0.0.1", port=8402)
"""

from __future__ import annotations

__all__ = ["create_api_app"]

from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from dataguard import __version__
from dataguard.exceptions import DataGuardError

from .errors import (
    APIError,
    api_error_handler,
    dataguard_error_handler,
    http_exception_handler,
    validation_error_handler,
)
from .routes import analytics, data, history, messages, negotiate, policy

if TYPE_CHECKING:
    from dataguard.service import DataGuardService


def create_api_app(service: "DataGuardService | None" = None) -> FastAPI:
    """Create the FastAPI application with all routes.

    Args:
        service: Service backing the routes. If None, routes answer 503
            until app.state.service is set.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="DataGuard API",
        description="Policy-gated data negotiation and redaction",
        version=__version__,
    )
    app.state.service = service

    # Register exception handlers for structured error responses
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(DataGuardError, dataguard_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.include_router(negotiate.router, prefix="/api/negotiate", tags=["negotiate"])
    app.include_router(data.router, prefix="/api/data", tags=["data"])
    app.include_router(policy.router, prefix="/api/policy", tags=["policy"])
    app.include_router(history.router, prefix="/api/history", tags=["history"])
    app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])
    app.include_router(messages.router, prefix="/api/messages", tags=["messages"])

    return app
