"""Policy Enforcement Point (PEP) - redaction and transaction recording.

Structure:
    redaction.py      - Field-level redaction of matching records
    ledger.py         - Bounded ledger of negotiation attempts
"""

from dataguard.pep.ledger import CategoryAnalytics, LedgerEntry, TransactionLedger
from dataguard.pep.redaction import Disclosure, filter_records, redact_record

__all__ = [
    "CategoryAnalytics",
    "Disclosure",
    "LedgerEntry",
    "TransactionLedger",
    "filter_records",
    "redact_record",
]
