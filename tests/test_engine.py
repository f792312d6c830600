"""Unit tests for the negotiation engine.

Covers the decision order, privacy counter-offers, clamped terms, wallet
checks and ledger side effects.
Uses AAA pattern (Arrange-Act-Assert) for clarity.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from dataguard.context import NegotiationRequest, RequestedData, parse_request
from dataguard.exceptions import ConfigurationError, PolicyDeniedError
from dataguard.pdp.decision import Decision, DenialCode, NegotiationResult
from dataguard.pdp.engine import PERSONAL_INFO_CONFLICT_REASON, NegotiationEngine
from dataguard.pdp.evaluator import is_allowed
from dataguard.pdp.policy import Policy, PricingConfig
from dataguard.pep.ledger import LedgerEntry, TransactionLedger

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
WALLET = "0x" + "a" * 40


def fixed_clock() -> datetime:
    return NOW


def make_request(
    category: str = "delivery",
    max_age: int = 30,
    max_emails: int = 10,
    include_bodies: bool = False,
    include_personal_info: bool = False,
) -> NegotiationRequest:
    return NegotiationRequest(
        category=category,
        requester_id="agent-1",
        requested_data=RequestedData(
            max_age=max_age,
            max_emails=max_emails,
            include_bodies=include_bodies,
            include_personal_info=include_personal_info,
        ),
    )


def make_policy(**overrides: Any) -> Policy:
    return Policy(wallet_address=WALLET, **overrides)


@pytest.fixture
def ledger() -> TransactionLedger:
    return TransactionLedger(clock=fixed_clock)


@pytest.fixture
def engine(ledger: TransactionLedger) -> NegotiationEngine:
    return NegotiationEngine(ledger, clock=fixed_clock)


class TestEvaluator:
    """Tests for category permission checks."""

    def test_default_policy_permissions(self) -> None:
        """Defaults share subscription and delivery only."""
        # Arrange
        policy = Policy()

        # Act / Assert
        assert is_allowed("subscription", policy) is True
        assert is_allowed("delivery", policy) is True
        assert is_allowed("purchase", policy) is False
        assert is_allowed("financial", policy) is False

    def test_global_switch_denies_everything(self) -> None:
        # Arrange
        policy = Policy(global_data_sharing=False)

        # Act / Assert
        assert is_allowed("delivery", policy) is False

    def test_unknown_category_is_denied(self) -> None:
        """Closed world: unrecognized categories are never allowed."""
        assert is_allowed("travel", Policy()) is False


class TestScenarios:
    """End-to-end negotiation scenarios."""

    def test_simple_delivery_request_is_accepted(self, engine: NegotiationEngine) -> None:
        """Delivery, 30 days, 10 records, no extras: accepted at 0.100."""
        # Act
        result = engine.negotiate(make_request(), make_policy())

        # Assert
        assert result.accepted is True
        assert result.decision is Decision.ACCEPT
        assert result.final_price == 0.1
        assert result.conditions == []
        assert result.adjusted_policy is not None
        assert result.adjusted_policy.max_age == 30
        assert result.adjusted_policy.max_count == 10
        assert result.adjusted_policy.redact_bodies is True
        assert result.adjusted_policy.redact_personal_info is True

    def test_body_request_gets_counter_offer(self, engine: NegotiationEngine) -> None:
        """Bodies under a redacting policy are denied with a 0.150 counter-offer."""
        # Act
        result = engine.negotiate(make_request(include_bodies=True), make_policy())

        # Assert
        assert result.accepted is False
        assert result.denial_code is DenialCode.PRIVACY_CONFLICT
        assert result.reason == "body access requested but policy requires redaction"
        assert result.counter_offer is not None
        assert result.counter_offer.price == 0.15
        assert result.counter_offer.conditions == ["redacted bodies only"]

    def test_volume_request_is_clamped(self, engine: NegotiationEngine) -> None:
        """20 subscription records price at 0.060 and are clamped to 10."""
        # Act
        result = engine.negotiate(make_request(category="subscription", max_emails=20), make_policy())

        # Assert
        assert result.accepted is True
        assert result.final_price == 0.06
        assert result.adjusted_policy is not None
        assert result.adjusted_policy.max_count == 10
        assert result.conditions == ["limit to 10 records maximum"]

    def test_demand_doubles_price_at_cap(self, ledger: TransactionLedger, engine: NegotiationEngine) -> None:
        """15 purchase requests in the last hour double the price to 0.500."""
        # Arrange
        for i in range(15):
            ledger.record(
                LedgerEntry(
                    category="purchase",
                    timestamp=NOW - timedelta(minutes=i + 1),
                    accepted=True,
                    price=0.25,
                    record_count=10,
                )
            )
        policy = make_policy(allow_purchase_proof=True)

        # Act
        result = engine.negotiate(make_request(category="purchase"), policy)

        # Assert
        assert result.accepted is True
        assert result.final_price == 0.5


class TestDecisionOrder:
    """Tests for denial reasons and their precedence."""

    def test_global_sharing_disabled_comes_first(self, engine: NegotiationEngine) -> None:
        """Global off wins over every later check."""
        # Arrange
        policy = Policy(global_data_sharing=False, pricing=PricingConfig(delivery=0.0))

        # Act
        result = engine.negotiate(make_request(include_bodies=True), policy)

        # Assert
        assert result.reason == "global sharing disabled"
        assert result.denial_code is DenialCode.GLOBAL_SHARING_DISABLED
        assert result.counter_offer is None

    def test_category_disabled(self, engine: NegotiationEngine) -> None:
        # Act
        result = engine.negotiate(make_request(category="financial"), make_policy())

        # Assert
        assert result.accepted is False
        assert result.reason == "financial access disabled"
        assert result.denial_code is DenialCode.CATEGORY_DISABLED

    def test_pricing_unset_is_a_denial_not_a_free_grant(self, engine: NegotiationEngine) -> None:
        """A zero base price denies with pricing unset."""
        # Arrange
        policy = make_policy(pricing=PricingConfig(delivery=0.0))

        # Act
        result = engine.negotiate(make_request(), policy)

        # Assert
        assert result.accepted is False
        assert result.reason == "pricing unset for delivery"
        assert result.denial_code is DenialCode.PRICING_UNSET

    def test_price_rounding_to_zero_is_denied(self, ledger: TransactionLedger, engine: NegotiationEngine) -> None:
        """A tiny positive base price is denied rather than accepted for free."""
        # Arrange
        policy = make_policy(pricing=PricingConfig(delivery=0.0004))

        # Act
        result = engine.negotiate(make_request(), policy)

        # Assert
        assert result.accepted is False
        assert result.final_price is None
        assert result.denial_code is DenialCode.PRICING_UNSET
        assert result.reason == "pricing unset for delivery: price rounds to zero"
        assert ledger.history()[0].price == 0.0

    def test_personal_info_conflict_counter_offer(self, engine: NegotiationEngine) -> None:
        """Personal info under a redacting policy costs 1.3x in the offer."""
        # Act
        result = engine.negotiate(make_request(include_personal_info=True), make_policy())

        # Assert
        assert result.reason == PERSONAL_INFO_CONFLICT_REASON
        assert result.counter_offer is not None
        assert result.counter_offer.price == 0.13
        assert result.counter_offer.conditions == ["redacted personal info only"]

    def test_bodies_allowed_when_policy_does_not_redact(self, engine: NegotiationEngine) -> None:
        """A permissive policy accepts bodies and leaves them unredacted."""
        # Arrange
        policy = make_policy(redact_email_bodies=False)

        # Act
        result = engine.negotiate(make_request(include_bodies=True), policy)

        # Assert
        assert result.accepted is True
        assert result.final_price == 0.15
        assert result.adjusted_policy is not None
        assert result.adjusted_policy.redact_bodies is False

    @pytest.mark.parametrize("wallet", ["", "0x123", "a" * 42, "0x" + "g" * 40])
    def test_invalid_wallet_denies(self, engine: NegotiationEngine, wallet: str) -> None:
        # Arrange
        policy = Policy(wallet_address=wallet)

        # Act
        result = engine.negotiate(make_request(), policy)

        # Assert
        assert result.accepted is False
        assert result.reason == "invalid payment configuration"
        assert result.denial_code is DenialCode.INVALID_PAYMENT_CONFIG

    def test_wallet_check_can_be_disabled(self, ledger: TransactionLedger) -> None:
        """require_wallet=False accepts without a payout address."""
        # Arrange
        engine = NegotiationEngine(ledger, clock=fixed_clock, require_wallet=False)

        # Act
        result = engine.negotiate(make_request(), Policy())

        # Assert
        assert result.accepted is True

    def test_terms_are_clamped_to_policy_ceilings(self, engine: NegotiationEngine) -> None:
        """Age and count above the ceilings are clamped and noted."""
        # Act
        result = engine.negotiate(make_request(max_age=120, max_emails=25), make_policy())

        # Assert
        assert result.accepted is True
        assert result.adjusted_policy is not None
        assert result.adjusted_policy.max_age == 90
        assert result.adjusted_policy.max_count == 10
        assert result.conditions == ["limit to 90 days maximum", "limit to 10 records maximum"]
        assert result.final_price == 0.13


class TestLedgerSideEffects:
    """Every negotiation is recorded, accepted or not."""

    def test_accepted_request_is_recorded(self, ledger: TransactionLedger, engine: NegotiationEngine) -> None:
        # Act
        engine.negotiate(make_request(max_emails=5), make_policy())

        # Assert
        [entry] = ledger.history()
        assert entry.accepted is True
        assert entry.price == 0.1
        assert entry.record_count == 5
        assert entry.requester_id == "agent-1"
        assert entry.timestamp == NOW

    def test_denied_request_is_recorded(self, ledger: TransactionLedger, engine: NegotiationEngine) -> None:
        # Act
        engine.negotiate(make_request(), Policy(global_data_sharing=False))

        # Assert
        [entry] = ledger.history()
        assert entry.accepted is False
        assert entry.price == 0.0
        assert entry.record_count == 0
        assert entry.reason == "global sharing disabled"

    def test_request_timestamp_is_kept(self, ledger: TransactionLedger, engine: NegotiationEngine) -> None:
        """A caller-supplied timestamp is recorded instead of the clock."""
        # Arrange
        stamped = make_request().model_copy(update={"timestamp": NOW - timedelta(minutes=5)})

        # Act
        engine.negotiate(stamped, make_policy())

        # Assert
        assert ledger.history()[0].timestamp == NOW - timedelta(minutes=5)

    def test_earlier_negotiations_raise_demand(self, engine: NegotiationEngine) -> None:
        """Three earlier delivery negotiations give a 1.3x demand factor."""
        # Arrange
        policy = make_policy()
        for _ in range(3):
            engine.negotiate(make_request(), policy)

        # Act
        result = engine.negotiate(make_request(), policy)

        # Assert
        assert result.final_price == 0.13

    def test_naive_request_timestamp_counts_toward_demand(self, engine: NegotiationEngine) -> None:
        """A request stamped without a timezone does not break later negotiations."""
        # Arrange
        policy = make_policy()
        first = parse_request(
            {
                "category": "delivery",
                "requester_id": "agent-1",
                "requested_data": {"max_age": 30, "max_emails": 10},
                "timestamp": "2026-03-01T11:55:00",
            }
        )
        engine.negotiate(first, policy)

        # Act
        result = engine.negotiate(make_request(), policy)

        # Assert
        assert result.accepted is True
        assert result.final_price == 0.11

    def test_quote_does_not_record(self, ledger: TransactionLedger, engine: NegotiationEngine) -> None:
        # Act
        price_quote = engine.quote(make_request(), make_policy())

        # Assert
        assert price_quote.price == 0.1
        assert ledger.count == 0

    def test_event_logger_receives_every_decision(self, ledger: TransactionLedger) -> None:
        """The audit hook sees the request, result and quote."""

        # Arrange
        class RecordingLogger:
            def __init__(self) -> None:
                self.calls: list[tuple[Any, ...]] = []

            def log(self, *args: Any) -> None:
                self.calls.append(args)

        recorder = RecordingLogger()
        engine = NegotiationEngine(ledger, clock=fixed_clock, event_logger=recorder)  # type: ignore[arg-type]

        # Act
        engine.negotiate(make_request(), make_policy())
        engine.negotiate(make_request(category="financial"), make_policy())

        # Assert
        assert len(recorder.calls) == 2
        accepted_request, accepted_result, _, accepted_quote, eval_ms = recorder.calls[0]
        assert accepted_request.category == "delivery"
        assert accepted_result.accepted is True
        assert accepted_quote.price == 0.1
        assert eval_ms >= 0
        _, denied_result, _, denied_quote, _ = recorder.calls[1]
        assert denied_result.accepted is False
        assert denied_quote is None


class TestRaiseForDenial:
    """Tests for converting results into exceptions."""

    def test_accepted_result_does_not_raise(self, engine: NegotiationEngine) -> None:
        # Arrange
        result = engine.negotiate(make_request(), make_policy())

        # Act / Assert
        result.raise_for_denial("delivery")

    def test_policy_denial_raises_with_counter_offer(self, engine: NegotiationEngine) -> None:
        # Arrange
        result = engine.negotiate(make_request(include_bodies=True), make_policy())

        # Act / Assert
        with pytest.raises(PolicyDeniedError) as exc_info:
            result.raise_for_denial("delivery")
        assert exc_info.value.category == "delivery"
        assert exc_info.value.to_dict()["counter_offer"] == {
            "price": 0.15,
            "conditions": ["redacted bodies only"],
        }

    @pytest.mark.parametrize("code", [DenialCode.PRICING_UNSET, DenialCode.INVALID_PAYMENT_CONFIG])
    def test_configuration_denials_raise_configuration_error(self, code: DenialCode) -> None:
        # Arrange
        result = NegotiationResult.deny(code, "broken")

        # Act / Assert
        with pytest.raises(ConfigurationError, match="broken"):
            result.raise_for_denial()

    def test_accepted_result_requires_terms(self) -> None:
        """An accepted result without price or terms is rejected."""
        with pytest.raises(ValueError):
            NegotiationResult(accepted=True)
