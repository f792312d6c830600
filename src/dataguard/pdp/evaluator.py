"""Policy evaluator - is a category currently shareable?

Two switches gate every category:
1. global_data_sharing (master switch)
2. allow_<category>_proof (per-category switch)

Unknown categories are denied, not erred (closed world).
"""

from __future__ import annotations

__all__ = ["CATEGORY_FLAGS", "is_allowed"]

from dataguard.pdp.policy import Policy

# Category -> Policy attribute holding its allow flag
CATEGORY_FLAGS: dict[str, str] = {
    "subscription": "allow_subscription_proof",
    "delivery": "allow_delivery_proof",
    "purchase": "allow_purchase_proof",
    "financial": "allow_financial_proof",
}


def is_allowed(category: str, policy: Policy) -> bool:
    """Check whether the policy currently permits a category.

    Args:
        category: Requested category (may be unrecognized).
        policy: Policy snapshot.

    Returns:
        False if global sharing is off or the category is unknown,
        otherwise the category's allow flag.
    """
    if not policy.global_data_sharing:
        return False
    flag = CATEGORY_FLAGS.get(category)
    if flag is None:
        return False
    return bool(getattr(policy, flag))
