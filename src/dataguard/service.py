"""DataGuard service - wires the engine to its collaborators.

One service instance owns one ledger and one engine and talks to:
- a PolicyStore (read once per call, never cached across calls)
- a RecordSource (fetched only after acceptance)
- an optional PaymentService (settled before disclosure)

Request lifecycle for request_data():
1. Read policy snapshot
2. Negotiate (always recorded in the ledger)
3. Denial → PolicyDeniedError / ConfigurationError
4. Settle payment, if a PaymentService is configured
5. Fetch records for the negotiated age window
6. Filter and redact under the negotiated terms

UpstreamFetchError from step 5 propagates unchanged. It is never turned
into an empty record list.
"""

from __future__ import annotations

__all__ = [
    "DataGuardService",
    "DataResponse",
]

import logging
import uuid
from typing import Any

from pydantic import BaseModel, Field

from dataguard.context import DisclosedRecord, NegotiationRequest, Predicate
from dataguard.exceptions import PolicyDeniedError
from dataguard.payments import PaymentReceipt, create_payment_request
from dataguard.pdp.decision import NegotiationResult
from dataguard.pdp.engine import NegotiationEngine
from dataguard.pdp.matcher import PredicateOutcome, evaluate_predicate
from dataguard.pdp.policy import Policy
from dataguard.pdp.pricing import PriceQuote
from dataguard.pdp.protocol import PaymentService, PolicyStore, RecordSource
from dataguard.pep.ledger import CategoryAnalytics, LedgerEntry, TransactionLedger
from dataguard.pep.redaction import filter_records
from dataguard.utils.clock import Clock, utc_now
from dataguard.utils.policy.policy_helpers import apply_policy_update

logger = logging.getLogger(__name__)


class DataResponse(BaseModel):
    """Structured response for an accepted data request.

    Attributes:
        accepted: Always True (denials raise).
        price: Price charged.
        reason: Always None on acceptance; kept for a uniform wire shape.
        conditions: Advisory conditions from negotiation.
        records: Disclosed, redacted records.
        payment: Settlement receipt, if a PaymentService is configured.
    """

    accepted: bool = True
    price: float
    reason: str | None = None
    conditions: list[str] = Field(default_factory=list)
    records: list[DisclosedRecord] = Field(default_factory=list)
    payment: PaymentReceipt | None = None


class DataGuardService:
    """Facade over engine, ledger, policy store and record source."""

    def __init__(
        self,
        policy_store: PolicyStore,
        record_source: RecordSource,
        engine: NegotiationEngine,
        payment_service: PaymentService | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.policy_store = policy_store
        self.record_source = record_source
        self.engine = engine
        self.payment_service = payment_service
        self._clock = clock

    @property
    def ledger(self) -> TransactionLedger:
        return self.engine.ledger

    # ------------------------------------------------------------------
    # Negotiation
    # ------------------------------------------------------------------

    def negotiate(self, request: NegotiationRequest) -> NegotiationResult:
        """Negotiate under the current policy. Denials are returned, not raised."""
        return self.engine.negotiate(request, self.policy_store.get_policy())

    def quote(self, request: NegotiationRequest) -> PriceQuote:
        """Price a request at current demand without recording it.

        Raises:
            ConfigurationError: If the category's base price is unset.
        """
        return self.engine.quote(request, self.policy_store.get_policy())

    def request_data(self, request: NegotiationRequest) -> DataResponse:
        """Negotiate, settle and disclose.

        Args:
            request: Validated request.

        Returns:
            DataResponse with the disclosed records.

        Raises:
            PolicyDeniedError: If the policy denies the request or payment fails.
            ConfigurationError: If pricing or payment configuration is invalid.
            UpstreamFetchError: If the record source fails.
        """
        policy = self.policy_store.get_policy()
        result = self.engine.negotiate(request, policy)
        result.raise_for_denial(request.category)
        assert result.final_price is not None and result.adjusted_policy is not None

        receipt = self._settle(request, policy, result.final_price)

        adjusted = result.adjusted_policy
        raw = self.record_source.fetch_records(request.category, adjusted.max_age)
        records = filter_records(
            raw,
            request.to_predicate(max_age=adjusted.max_age),
            policy,
            adjusted,
            now=self._clock(),
        )
        logger.info(
            "Disclosed %d of %d %s records to %s",
            len(records),
            len(raw),
            request.category,
            request.requester_id,
        )
        return DataResponse(
            price=result.final_price,
            conditions=list(result.conditions),
            records=records,
            payment=receipt,
        )

    def _settle(self, request: NegotiationRequest, policy: Policy, price: float) -> PaymentReceipt | None:
        if self.payment_service is None:
            return None
        payment_request = create_payment_request(
            request.category,
            policy,
            price,
            request_id=uuid.uuid4().hex,
            clock=self._clock,
        )
        receipt = self.payment_service.settle(payment_request)
        if not receipt.success:
            logger.warning("Payment failed for %s request: %s", request.category, receipt.error)
            raise PolicyDeniedError(
                f"payment failed: {receipt.error or 'unknown error'}",
                category=request.category,
            )
        return receipt

    def evaluate(self, predicate: Predicate) -> PredicateOutcome:
        """Count matching records for a predicate (input to proof services).

        Raises:
            UpstreamFetchError: If the record source fails.
        """
        records = self.record_source.fetch_records(predicate.category, predicate.max_age)
        return evaluate_predicate(records, predicate, now=self._clock())

    # ------------------------------------------------------------------
    # Policy
    # ------------------------------------------------------------------

    def get_policy(self) -> Policy:
        return self.policy_store.get_policy()

    def update_policy(self, policy: Policy) -> Policy:
        """Replace the whole policy. Returns the stored (stamped) policy."""
        self.policy_store.set_policy(policy)
        stored = self.policy_store.get_policy()
        logger.info("Policy updated to %s", stored.version)
        return stored

    def patch_policy(self, changes: dict[str, Any]) -> Policy:
        """Apply a partial update on top of the current policy.

        Raises:
            RequestValidationError: If the merged policy is invalid.
        """
        return self.update_policy(apply_policy_update(self.get_policy(), changes))

    # ------------------------------------------------------------------
    # Ledger views
    # ------------------------------------------------------------------

    def history(self, limit: int | None = None) -> list[LedgerEntry]:
        return self.ledger.history(limit)

    def analytics(self) -> dict[str, CategoryAnalytics]:
        return self.ledger.analytics(now=self._clock())
