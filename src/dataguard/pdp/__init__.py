"""Policy Decision Point (PDP) - negotiation and pricing.

This module decides whether a data request is admitted and at what price.

- context/: Validated inputs (records, predicates, requests)
- pdp/ (this module): Classifies, evaluates, prices, decides
- pep/: Enforces decisions (redaction) and records them (ledger)

The PDP performs no I/O. Policy, records and settlement are supplied by
collaborators (see protocol.py).

Structure:
    policy.py         - Policy model and defaults
    matcher.py        - Predicate classifier
    evaluator.py      - Category permission checks
    pricing.py        - Quote formula
    decision.py       - Decision enum and NegotiationResult
    engine.py         - NegotiationEngine (coordinator)
    protocol.py       - Collaborator protocols
"""

from dataguard.pdp.policy import Policy, PricingConfig, create_default_policy
from dataguard.pdp.decision import (
    AdjustedPolicy,
    CounterOffer,
    Decision,
    DenialCode,
    NegotiationResult,
)
from dataguard.pdp.evaluator import is_allowed
from dataguard.pdp.matcher import PredicateOutcome, classify, evaluate_predicate
from dataguard.pdp.pricing import PriceQuote, quote
from dataguard.pdp.engine import NegotiationEngine
from dataguard.pdp.protocol import PaymentService, PolicyStore, RecordSource

__all__ = [
    # Policy models
    "Policy",
    "PricingConfig",
    "create_default_policy",
    # Decision
    "AdjustedPolicy",
    "CounterOffer",
    "Decision",
    "DenialCode",
    "NegotiationResult",
    # Evaluation
    "is_allowed",
    "PredicateOutcome",
    "classify",
    "evaluate_predicate",
    "PriceQuote",
    "quote",
    # Engine
    "NegotiationEngine",
    # Collaborators
    "PaymentService",
    "PolicyStore",
    "RecordSource",
]
