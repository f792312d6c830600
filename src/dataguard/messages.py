"""Tagged messages - one validated variant per message kind.

Messages arrive as JSON objects with a "type" tag:

    {"type": "negotiate_request", "request": {...}}
    {"type": "request_data", "request": {...}}
    {"type": "get_policy"}
    {"type": "update_policy", "policy": {...partial fields...}}
    {"type": "get_history", "limit": 10}
    {"type": "get_analytics"}

parse_message() validates the whole payload before anything reaches the
service, so malformed messages never touch policy or ledger state.

dispatch() converts expected failures (denials, configuration, upstream,
validation) into MessageResponse(success=False, ...). Unexpected errors
propagate.
"""

from __future__ import annotations

__all__ = [
    "GetAnalyticsMessage",
    "GetHistoryMessage",
    "GetPolicyMessage",
    "Message",
    "MessageResponse",
    "NegotiateRequestMessage",
    "RequestDataMessage",
    "UpdatePolicyMessage",
    "dispatch",
    "parse_message",
]

import logging
from dataclasses import asdict
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from dataguard.context import NegotiationRequest
from dataguard.exceptions import DataGuardError, PolicyDeniedError, RequestValidationError
from dataguard.pep.ledger import LedgerEntry
from dataguard.service import DataGuardService

logger = logging.getLogger(__name__)


class NegotiateRequestMessage(BaseModel):
    type: Literal["negotiate_request"]
    request: NegotiationRequest

    model_config = ConfigDict(frozen=True)


class RequestDataMessage(BaseModel):
    type: Literal["request_data"]
    request: NegotiationRequest

    model_config = ConfigDict(frozen=True)


class GetPolicyMessage(BaseModel):
    type: Literal["get_policy"]

    model_config = ConfigDict(frozen=True)


class UpdatePolicyMessage(BaseModel):
    """Partial policy update. Fields not given keep their current value."""

    type: Literal["update_policy"]
    policy: dict[str, Any]

    model_config = ConfigDict(frozen=True)


class GetHistoryMessage(BaseModel):
    type: Literal["get_history"]
    limit: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(frozen=True)


class GetAnalyticsMessage(BaseModel):
    type: Literal["get_analytics"]

    model_config = ConfigDict(frozen=True)


Message = Annotated[
    Union[
        NegotiateRequestMessage,
        RequestDataMessage,
        GetPolicyMessage,
        UpdatePolicyMessage,
        GetHistoryMessage,
        GetAnalyticsMessage,
    ],
    Field(discriminator="type"),
]

_message_adapter: TypeAdapter[Message] = TypeAdapter(Message)
_history_adapter: TypeAdapter[list[LedgerEntry]] = TypeAdapter(list[LedgerEntry])


class MessageResponse(BaseModel):
    """Reply to a tagged message.

    Attributes:
        success: Whether the message was handled.
        data: Payload on success (JSON-compatible).
        error: Human-readable error on failure.
        error_type: Exception class name on failure.
        details: Structured error context (e.g., counter-offer).
    """

    success: bool
    data: Any = None
    error: str | None = None
    error_type: str | None = None
    details: dict[str, Any] | None = None


def parse_message(data: Any) -> Message:
    """Validate a raw message payload.

    Raises:
        RequestValidationError: If the type tag is unknown or fields are invalid.
    """
    try:
        return _message_adapter.validate_python(data)
    except ValidationError as e:
        raise RequestValidationError.from_pydantic(e, "message") from e


def _handle(service: DataGuardService, message: Message) -> Any:
    if isinstance(message, NegotiateRequestMessage):
        return service.negotiate(message.request).model_dump(mode="json")
    if isinstance(message, RequestDataMessage):
        return service.request_data(message.request).model_dump(mode="json")
    if isinstance(message, GetPolicyMessage):
        return service.get_policy().model_dump(mode="json")
    if isinstance(message, UpdatePolicyMessage):
        return service.patch_policy(message.policy).model_dump(mode="json")
    if isinstance(message, GetHistoryMessage):
        return _history_adapter.dump_python(service.history(message.limit), mode="json")
    if isinstance(message, GetAnalyticsMessage):
        return {category: asdict(stats) for category, stats in service.analytics().items()}
    raise TypeError(f"Unhandled message type: {type(message).__name__}")


def dispatch(service: DataGuardService, payload: Any) -> MessageResponse:
    """Parse and handle one message.

    Args:
        service: Service handling the message.
        payload: Raw message (dict) or an already parsed Message.

    Returns:
        MessageResponse. Expected failures are reported, not raised.
    """
    try:
        message = payload if isinstance(payload, BaseModel) else parse_message(payload)
        data = _handle(service, message)
    except PolicyDeniedError as e:
        return MessageResponse(success=False, error=e.reason, error_type=type(e).__name__, details=e.to_dict())
    except RequestValidationError as e:
        return MessageResponse(
            success=False,
            error=e.message,
            error_type=type(e).__name__,
            details={"errors": e.errors},
        )
    except DataGuardError as e:
        logger.warning("Message handling failed: %s", e.message)
        return MessageResponse(success=False, error=e.message, error_type=type(e).__name__)
    return MessageResponse(success=True, data=data)
