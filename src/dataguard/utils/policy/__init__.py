"""Policy utilities for dataguard.

Provides policy file management and the built-in policy stores.
"""

from dataguard.utils.policy.policy_helpers import (
    InMemoryPolicyStore,
    JsonFilePolicyStore,
    apply_policy_update,
    create_default_policy_file,
    get_policy_path,
    load_policy,
    policy_exists,
    save_policy,
    stamp_policy,
)

__all__ = [
    "InMemoryPolicyStore",
    "JsonFilePolicyStore",
    "apply_policy_update",
    "create_default_policy_file",
    "get_policy_path",
    "load_policy",
    "policy_exists",
    "save_policy",
    "stamp_policy",
]
