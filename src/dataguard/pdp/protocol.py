"""Protocols for the engine's external collaborators.

The engine never does I/O of its own. Policy persistence, record fetching
and payment settlement are supplied by collaborators that implement these
protocols (structural subtyping, no inheritance required).

Built-in implementations:
    PolicyStore:    utils/policy (InMemoryPolicyStore, JsonFilePolicyStore)
    RecordSource:   sources/mail.py (MailServiceClient)
    PaymentService: none (settlement is out of scope; inject your own)

Example adapter:

    class KeyValuePolicyStore:
        def get_policy(self) -> Policy:
            raw = self._kv.get("userPolicy")
            if raw is None:
                raise PolicyNotFoundError("no policy stored")
            return Policy.model_validate_json(raw)

        def set_policy(self, policy: Policy) -> None:
            self._kv.set("userPolicy", policy.model_dump_json())
"""

from __future__ import annotations

__all__ = [
    "PaymentService",
    "PolicyStore",
    "RecordSource",
]

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from dataguard.context import Record
    from dataguard.payments import PaymentReceipt, PaymentRequest
    from dataguard.pdp.policy import Policy


@runtime_checkable
class PolicyStore(Protocol):
    """Get/set contract for the single active policy.

    Thread-safety:
    - get_policy() must return a complete snapshot, never a half-applied update
    - set_policy() must replace the whole policy atomically
    """

    def get_policy(self) -> "Policy":
        """Get the current policy.

        Raises:
            PolicyNotFoundError: If no policy has been stored.
        """
        ...

    def set_policy(self, policy: "Policy") -> None:
        """Replace the current policy.

        Raises:
            RequestValidationError: If the policy is rejected.
        """
        ...


@runtime_checkable
class RecordSource(Protocol):
    """Fetch-like interface to the underlying data source."""

    def fetch_records(self, category: str, max_age: int) -> list["Record"]:
        """Fetch candidate records for a category.

        Implementations may pre-filter, but the engine re-applies the
        classifier, so over-fetching is safe.

        Args:
            category: Requested category.
            max_age: Maximum record age in days.

        Returns:
            Candidate records, most recent first.

        Raises:
            UpstreamFetchError: If the source fails. Implementations must
                not return an empty list in place of an error.
        """
        ...


@runtime_checkable
class PaymentService(Protocol):
    """Capability for settling an accepted, priced negotiation."""

    def settle(self, request: "PaymentRequest") -> "PaymentReceipt":
        """Settle a payment request.

        Whether this is network-bound is the implementation's concern.
        """
        ...
