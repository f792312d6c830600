"""Structured API error handling.

This module provides:
- ErrorCode enum with domain-grouped error codes
- APIError exception class for structured error responses
- Exception handlers mapping dataguard exceptions onto HTTP statuses

Exception mapping:
    PolicyDeniedError       → 403 POLICY_DENIED
    PolicyNotFoundError     → 404 POLICY_NOT_FOUND
    ConfigurationError      → 409 CONFIGURATION_INVALID
    RequestValidationError  → 422 VALIDATION_ERROR
    UpstreamFetchError      → 502 UPSTREAM_ERROR

Response format:
    {
        "detail": {
            "code": "POLICY_DENIED",
            "message": "body access requested but policy requires redaction",
            "details": {"reason": "...", "counter_offer": {...}}
        }
    }
"""

from __future__ import annotations

__all__ = [
    "APIError",
    "ErrorCode",
    "api_error_handler",
    "dataguard_error_handler",
    "http_exception_handler",
    "validation_error_handler",
]

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dataguard import exceptions


class ErrorCode(str, Enum):
    """API error codes for programmatic handling.

    Codes are namespaced by domain:
    - POLICY_*: Negotiation denials and policy management errors
    - CONFIGURATION_*: Pricing, wallet or config errors
    - VALIDATION_*: Input validation errors
    - UPSTREAM_*: Record source failures
    - INTERNAL_*: Internal server errors
    """

    # Policy errors (403, 404)
    POLICY_DENIED = "POLICY_DENIED"
    POLICY_NOT_FOUND = "POLICY_NOT_FOUND"

    # Configuration errors (409)
    CONFIGURATION_INVALID = "CONFIGURATION_INVALID"

    # Generic (404, 409)
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Validation errors (400, 422)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Internal errors (500, 502, 503)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class APIError(HTTPException):
    """Structured API error with error code.

    Attributes:
        status_code: HTTP status code.
        code: Error code from ErrorCode enum.
        error_message: Human-readable error message.
        error_details: Optional contextual details.
        validation_errors: Optional field-level validation errors.
    """

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
        validation_errors: list[dict[str, Any]] | None = None,
    ) -> None:
        self.code = code
        self.error_message = message
        self.error_details = details
        self.validation_errors = validation_errors

        detail: dict[str, Any] = {
            "code": code.value,
            "message": message,
        }
        if details:
            detail["details"] = details
        if validation_errors:
            detail["validation_errors"] = validation_errors

        super().__init__(status_code=status_code, detail=detail)

    @classmethod
    def from_exception(cls, exc: exceptions.DataGuardError) -> "APIError":
        """Map a dataguard exception onto its structured API error."""
        if isinstance(exc, exceptions.PolicyDeniedError):
            return cls(403, ErrorCode.POLICY_DENIED, exc.reason, details=exc.to_dict())
        if isinstance(exc, exceptions.PolicyNotFoundError):
            return cls(404, ErrorCode.POLICY_NOT_FOUND, exc.message)
        if isinstance(exc, exceptions.ConfigurationError):
            return cls(409, ErrorCode.CONFIGURATION_INVALID, exc.message)
        if isinstance(exc, exceptions.RequestValidationError):
            return cls(422, ErrorCode.VALIDATION_ERROR, exc.message, validation_errors=exc.errors)
        if isinstance(exc, exceptions.UpstreamFetchError):
            details: dict[str, Any] = {}
            if exc.category is not None:
                details["category"] = exc.category
            if exc.status_code is not None:
                details["upstream_status"] = exc.status_code
            return cls(502, ErrorCode.UPSTREAM_ERROR, exc.message, details=details or None)
        return cls(500, ErrorCode.INTERNAL_ERROR, exc.message)


def _error_response(status_code: int, detail: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions with structured response."""
    return _error_response(exc.status_code, exc.detail)


async def dataguard_error_handler(request: Request, exc: exceptions.DataGuardError) -> JSONResponse:
    """Handle dataguard exceptions raised by the service layer."""
    error = APIError.from_exception(exc)
    return _error_response(error.status_code, error.detail)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body validation failures as VALIDATION_ERROR.

    A single failure names its field ("requested_data.max_age: ...");
    several are summarised by count. Each one is listed in validation_errors.
    """
    errors = exc.errors()
    listed = [
        {"loc": list(e.get("loc", [])), "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in errors
    ]

    if len(listed) == 1:
        field = ".".join(str(part) for part in listed[0]["loc"] if part != "body")
        msg = listed[0]["msg"] or "Validation error"
        message = f"{field}: {msg}" if field else msg
    else:
        message = f"{len(listed)} validation errors"

    return _error_response(
        422,
        {"code": ErrorCode.VALIDATION_ERROR.value, "message": message, "validation_errors": listed},
    )


_DEFAULT_CODES = {
    400: ErrorCode.VALIDATION_ERROR,
    403: ErrorCode.POLICY_DENIED,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    502: ErrorCode.UPSTREAM_ERROR,
    503: ErrorCode.SERVICE_UNAVAILABLE,
}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap plain HTTPException details in the structured format."""
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        return _error_response(exc.status_code, exc.detail)

    code = _DEFAULT_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    message = str(exc.detail) if exc.detail else f"HTTP {exc.status_code}"
    return _error_response(exc.status_code, {"code": code.value, "message": message})
