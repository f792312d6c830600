"""Pydantic models for telemetry logs."""

from dataguard.telemetry.models.decision import NegotiationEvent, PriceFactors

__all__ = [
    "NegotiationEvent",
    "PriceFactors",
]
