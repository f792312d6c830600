"""Negotiation engine - turn a request and a policy into a priced decision.

Evaluation flow (single pass, no retries):
1. Global sharing disabled        → DENY "global sharing disabled"
2. Category disabled              → DENY "<category> access disabled"
3. Base price unset (≤ 0)         → DENY "pricing unset for <category>"
   else quote = base × demand × privacy × volume
4. Privacy conflict               → DENY with counter-offer at the quote
   - bodies requested, policy redacts bodies
   - personal info requested, policy redacts personal info
5. Wallet required and invalid    → DENY "invalid payment configuration"
6. Otherwise                      → ACCEPT at the quote, with adjusted terms

Adjusted terms are never looser than the policy:
- max_age   = min(requested, policy.max_email_age)
- max_count = min(requested, policy.max_emails_per_request)
- redact_bodies        = not requested OR policy redacts
- redact_personal_info = not requested OR policy redacts

Side effect: every call records a LedgerEntry (accepted or denied), which
feeds later demand multipliers. Validation happens before this engine is
reached (see context.parse_request), so malformed requests never touch the
ledger.

Design principles:
1. Policy is passed in, never read from ambient state
2. "Now" comes from an injected clock
3. Denials are results, not exceptions (use raise_for_denial() to convert)
"""

from __future__ import annotations

__all__ = ["NegotiationEngine"]

import logging
import time
from typing import TYPE_CHECKING

from dataguard.constants import DEMAND_WINDOW_SECONDS
from dataguard.context import NegotiationRequest
from dataguard.exceptions import ConfigurationError
from dataguard.payments import validate_wallet_address
from dataguard.pdp.decision import AdjustedPolicy, CounterOffer, DenialCode, NegotiationResult
from dataguard.pdp.evaluator import is_allowed
from dataguard.pdp.policy import Policy
from dataguard.pdp.pricing import PriceQuote, quote, resolve_base_price
from dataguard.pep.ledger import LedgerEntry, TransactionLedger
from dataguard.utils.clock import Clock, utc_now

if TYPE_CHECKING:
    from dataguard.telemetry.audit.decision_logger import NegotiationEventLogger

logger = logging.getLogger(__name__)

BODY_CONFLICT_REASON = "body access requested but policy requires redaction"
PERSONAL_INFO_CONFLICT_REASON = "personal info access requested but policy requires redaction"


class NegotiationEngine:
    """Negotiation coordinator.

    Combines the policy evaluator, pricing engine and privacy checks into
    an accept/deny decision, and records every attempt in the ledger.

    Attributes:
        ledger: Ledger used for demand counts and recording.
        require_wallet: Whether a valid payout address is mandatory.
    """

    def __init__(
        self,
        ledger: TransactionLedger,
        *,
        clock: Clock = utc_now,
        require_wallet: bool = True,
        demand_window_seconds: float = DEMAND_WINDOW_SECONDS,
        event_logger: "NegotiationEventLogger | None" = None,
    ) -> None:
        """Initialize the engine.

        Args:
            ledger: Transaction ledger (shared across concurrent callers).
            clock: Source of "now".
            require_wallet: Deny when the policy has no valid wallet address.
            demand_window_seconds: Trailing window for the demand multiplier.
            event_logger: Optional audit logger for every decision.
        """
        self.ledger = ledger
        self.require_wallet = require_wallet
        self._clock = clock
        self._demand_window_seconds = demand_window_seconds
        self._event_logger = event_logger

    def quote(self, request: NegotiationRequest, policy: Policy) -> PriceQuote:
        """Price a request without deciding or recording anything.

        Args:
            request: Validated request.
            policy: Policy snapshot.

        Returns:
            PriceQuote at current demand.

        Raises:
            ConfigurationError: If the category's base price is unset.
        """
        base_price = resolve_base_price(request.category, policy)
        recent = self.ledger.recent_count(
            request.category,
            self._demand_window_seconds,
            now=self._clock(),
        )
        return quote(request, base_price, recent)

    def negotiate(self, request: NegotiationRequest, policy: Policy) -> NegotiationResult:
        """Decide on a request under a policy snapshot.

        Args:
            request: Validated request.
            policy: Policy snapshot (read once, never mutated).

        Returns:
            NegotiationResult (accepted with price and terms, or denied
            with reason and possibly a counter-offer).
        """
        start = time.perf_counter()
        timestamp = request.timestamp or self._clock()

        result, price_quote = self._decide(request, policy)

        self.ledger.record(
            LedgerEntry(
                category=request.category,
                timestamp=timestamp,
                accepted=result.accepted,
                price=result.final_price if result.final_price is not None else 0.0,
                record_count=result.adjusted_policy.max_count if result.adjusted_policy else 0,
                requester_id=request.requester_id,
                reason=result.reason,
            )
        )

        eval_ms = (time.perf_counter() - start) * 1000
        if result.accepted:
            logger.info(
                "Accepted %s request from %s at %s",
                request.category,
                request.requester_id,
                result.final_price,
            )
        else:
            logger.info(
                "Denied %s request from %s: %s",
                request.category,
                request.requester_id,
                result.reason,
            )
        if self._event_logger is not None:
            self._event_logger.log(request, result, policy, price_quote, eval_ms)
        return result

    def _decide(
        self,
        request: NegotiationRequest,
        policy: Policy,
    ) -> tuple[NegotiationResult, PriceQuote | None]:
        """Run the decision steps in order. Pure apart from the ledger read."""
        category = request.category
        wanted = request.requested_data

        if not policy.global_data_sharing:
            return NegotiationResult.deny(DenialCode.GLOBAL_SHARING_DISABLED, "global sharing disabled"), None

        if not is_allowed(category, policy):
            return NegotiationResult.deny(DenialCode.CATEGORY_DISABLED, f"{category} access disabled"), None

        try:
            price_quote = self.quote(request, policy)
        except ConfigurationError as e:
            return NegotiationResult.deny(DenialCode.PRICING_UNSET, e.message), None
        price = price_quote.price

        if wanted.include_bodies and policy.redact_email_bodies:
            offer = CounterOffer(price=price, conditions=["redacted bodies only"])
            return (
                NegotiationResult.deny(DenialCode.PRIVACY_CONFLICT, BODY_CONFLICT_REASON, offer),
                price_quote,
            )

        if wanted.include_personal_info and policy.redact_personal_info:
            offer = CounterOffer(price=price, conditions=["redacted personal info only"])
            return (
                NegotiationResult.deny(DenialCode.PRIVACY_CONFLICT, PERSONAL_INFO_CONFLICT_REASON, offer),
                price_quote,
            )

        if self.require_wallet and not validate_wallet_address(policy.wallet_address):
            return (
                NegotiationResult.deny(DenialCode.INVALID_PAYMENT_CONFIG, "invalid payment configuration"),
                price_quote,
            )

        conditions: list[str] = []
        if wanted.max_age > policy.max_email_age:
            conditions.append(f"limit to {policy.max_email_age} days maximum")
        if wanted.max_emails > policy.max_emails_per_request:
            conditions.append(f"limit to {policy.max_emails_per_request} records maximum")

        adjusted = AdjustedPolicy(
            max_age=min(wanted.max_age, policy.max_email_age),
            max_count=min(wanted.max_emails, policy.max_emails_per_request),
            redact_bodies=not wanted.include_bodies or policy.redact_email_bodies,
            redact_personal_info=not wanted.include_personal_info or policy.redact_personal_info,
        )
        result = NegotiationResult(
            accepted=True,
            final_price=price,
            adjusted_policy=adjusted,
            conditions=conditions,
        )
        return result, price_quote
