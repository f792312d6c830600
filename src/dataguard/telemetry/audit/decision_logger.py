"""Decision logging for negotiations.

Every negotiation outcome (accepted or denied) is logged to
<log_dir>/dataguard_logs/audit/decisions.jsonl.

Decision logs are always enabled when a logger is configured, regardless
of log_level.
"""

from __future__ import annotations

__all__ = [
    "NegotiationEventLogger",
    "create_decision_logger",
    "get_decisions_log_path",
]

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from dataguard.telemetry.models.decision import NegotiationEvent, PriceFactors
from dataguard.utils.logging.logger_setup import setup_jsonl_logger
from dataguard.utils.logging.logging_helpers import serialize_audit_event

if TYPE_CHECKING:
    from dataguard.context import NegotiationRequest
    from dataguard.pdp.decision import NegotiationResult
    from dataguard.pdp.policy import Policy
    from dataguard.pdp.pricing import PriceQuote

_system_logger = logging.getLogger(__name__)


def get_decisions_log_path(log_dir: Path) -> Path:
    """Path of decisions.jsonl under a configured log directory."""
    return Path(log_dir).expanduser() / "dataguard_logs" / "audit" / "decisions.jsonl"


def create_decision_logger(log_path: Path) -> logging.Logger:
    """Create the JSONL logger for negotiation events.

    Args:
        log_path: Path to decisions.jsonl file.

    Returns:
        Configured logger instance.
    """
    return setup_jsonl_logger("dataguard.audit.decisions", log_path, log_level=logging.INFO)


class NegotiationEventLogger:
    """Logs negotiation events to decisions.jsonl.

    If the primary write fails, the failure is reported on the module
    logger and the exception is re-raised to the caller.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def log(
        self,
        request: "NegotiationRequest",
        result: "NegotiationResult",
        policy: "Policy",
        price_quote: "PriceQuote | None",
        eval_ms: float,
    ) -> None:
        """Log one negotiation outcome.

        Args:
            request: The validated request.
            result: Engine outcome.
            policy: Policy snapshot the decision was made under.
            price_quote: Quote, if the engine got as far as pricing.
            eval_ms: Evaluation time in milliseconds.
        """
        wanted = request.requested_data
        factors = None
        if price_quote is not None:
            factors = PriceFactors(
                base_price=price_quote.base_price,
                demand=price_quote.demand_multiplier,
                privacy=price_quote.privacy_multiplier,
                volume=price_quote.volume_multiplier,
            )
        adjusted = result.adjusted_policy

        event = NegotiationEvent(
            decision=result.decision.value,
            category=request.category,
            requester_id=request.requester_id,
            requester_type=request.requester_type,
            requested_max_age=wanted.max_age,
            requested_max_emails=wanted.max_emails,
            include_bodies=wanted.include_bodies,
            include_personal_info=wanted.include_personal_info,
            price=result.final_price,
            factors=factors,
            granted_max_age=adjusted.max_age if adjusted else None,
            granted_max_count=adjusted.max_count if adjusted else None,
            reason=result.reason,
            denial_code=result.denial_code.value if result.denial_code else None,
            counter_offer_price=result.counter_offer.price if result.counter_offer else None,
            conditions=list(result.conditions) or None,
            policy_version=policy.version,
            eval_ms=round(eval_ms, 2),
        )

        event_data = serialize_audit_event(event)
        try:
            self._logger.info(event_data)
        except Exception:
            _system_logger.error(
                "Failed to write negotiation event for %s request from %s",
                request.category,
                request.requester_id,
                exc_info=True,
            )
            raise
