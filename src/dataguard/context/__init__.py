"""Inputs to the negotiation engine.

- record.py: Record (raw, from the data source) and DisclosedRecord (redacted view)
- request.py: Predicate and NegotiationRequest (validated at the boundary)
"""

from dataguard.context.record import DisclosedRecord, Record
from dataguard.context.request import (
    NegotiationRequest,
    Predicate,
    RequestedData,
    RequesterType,
    parse_request,
)

__all__ = [
    # Records
    "DisclosedRecord",
    "Record",
    # Requests
    "NegotiationRequest",
    "Predicate",
    "RequestedData",
    "RequesterType",
    "parse_request",
]
