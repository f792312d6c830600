"""Policy persistence - load, save and store the user policy.

Provides the GetPolicy/SetPolicy collaborator in two flavours:
- InMemoryPolicyStore: process-local, for services and tests
- JsonFilePolicyStore: policy.json in the app directory

Both replace the whole Policy object on update. Policy is frozen, so a
reader holding the old reference keeps a consistent snapshot.

Features (file store):
- Secure file permissions (0o700 for directory, 0o600 for file)
- Atomic writes (temp file + rename)
- Detailed validation error messages
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dataguard.exceptions import PolicyNotFoundError, RequestValidationError
from dataguard.pdp.policy import Policy, create_default_policy
from dataguard.utils.clock import Clock, utc_now
from dataguard.utils.file_helpers import (
    atomic_write_json,
    get_app_dir,
    get_next_version,
    load_validated_json,
    require_file_exists,
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

logger = logging.getLogger(__name__)


def get_policy_path() -> Path:
    """Get the full path to the policy file.

    Returns:
        Path to policy.json in the app directory.
    """
    return get_app_dir() / "policy.json"


def load_policy(path: Path | None = None) -> Policy:
    """Load policy from file.

    Args:
        path: Path to policy.json. If None, uses default location.

    Returns:
        Policy loaded from file.

    Raises:
        FileNotFoundError: If policy file does not exist.
        ValueError: If policy file contains invalid JSON or schema.
    """
    policy_path = path or get_policy_path()
    require_file_exists(policy_path, file_type="policy")
    return load_validated_json(
        policy_path,
        Policy,
        file_type="policy",
        recovery_hint="Edit the policy file to fix the errors.",
    )


def save_policy(policy: Policy, path: Path | None = None) -> None:
    """Save policy to file atomically.

    Args:
        policy: Policy to save.
        path: Path to save to. If None, uses default location.
    """
    atomic_write_json(path or get_policy_path(), policy.model_dump(mode="json"))


def policy_exists(path: Path | None = None) -> bool:
    """Check if policy file exists."""
    return (path or get_policy_path()).exists()


def create_default_policy_file(path: Path | None = None) -> Policy:
    """Create a default policy file if it doesn't exist.

    Args:
        path: Path to create. If None, uses default location.

    Returns:
        The Policy that was created.

    Raises:
        FileExistsError: If policy file already exists.
    """
    policy_path = path or get_policy_path()

    if policy_path.exists():
        raise FileExistsError(f"Policy file already exists: {policy_path}")

    policy = create_default_policy()
    save_policy(policy, policy_path)
    return policy


def stamp_policy(new_policy: Policy, previous: Policy | None, clock: Clock = utc_now) -> Policy:
    """Set version and last_updated metadata on a replacement policy.

    Args:
        new_policy: Policy about to be stored.
        previous: Policy being replaced, or None.
        clock: Source of last_updated.

    Returns:
        Copy of new_policy with bumped version and fresh timestamp.
    """
    version = get_next_version(previous.version if previous is not None else None)
    return new_policy.model_copy(update={"version": version, "last_updated": clock()})


def apply_policy_update(current: Policy, changes: dict[str, Any]) -> Policy:
    """Build a replacement policy from a partial update.

    The result is fully re-validated; the current policy is untouched.

    Args:
        current: Current policy.
        changes: Field values to replace (nested "pricing" may be partial).

    Returns:
        New validated Policy.

    Raises:
        RequestValidationError: If the merged policy is invalid.
    """
    merged = current.model_dump()
    pricing_changes = changes.get("pricing")
    merged.update({k: v for k, v in changes.items() if k != "pricing"})
    if isinstance(pricing_changes, dict):
        merged["pricing"] = {**merged["pricing"], **pricing_changes}
    elif pricing_changes is not None:
        merged["pricing"] = pricing_changes
    try:
        return Policy.model_validate(merged)
    except ValidationError as e:
        raise RequestValidationError.from_pydantic(e, "policy") from e


class InMemoryPolicyStore:
    """Process-local policy store.

    A single lock guards read/replace. Reads return the current frozen
    Policy reference, which later updates never modify.
    """

    def __init__(self, policy: Policy | None = None, clock: Clock = utc_now) -> None:
        """Initialize the store.

        Args:
            policy: Initial policy. None means "not set yet".
            clock: Source of last_updated on updates.
        """
        self._policy = policy
        self._clock = clock
        self._lock = threading.Lock()

    def get_policy(self) -> Policy:
        with self._lock:
            if self._policy is None:
                raise PolicyNotFoundError("No policy has been stored")
            return self._policy

    def set_policy(self, policy: Policy) -> None:
        with self._lock:
            self._policy = stamp_policy(policy, self._policy, self._clock)


class JsonFilePolicyStore:
    """Policy store backed by policy.json.

    Reads go to disk on every call (no caching beyond one call). Writes
    are atomic renames, so a concurrent reader sees either the old or the
    new file, never a partial one.
    """

    def __init__(self, path: Path | None = None, clock: Clock = utc_now) -> None:
        self.path = path or get_policy_path()
        self._clock = clock
        self._write_lock = threading.Lock()

    def get_policy(self) -> Policy:
        try:
            return load_policy(self.path)
        except FileNotFoundError as e:
            raise PolicyNotFoundError(str(e)) from e

    def set_policy(self, policy: Policy) -> None:
        with self._write_lock:
            previous: Policy | None = None
            if self.path.exists():
                try:
                    previous = load_policy(self.path)
                except ValueError as e:
                    # Replacing an invalid file is how users recover from it
                    logger.warning("Replacing invalid policy file %s: %s", self.path, e)
            save_policy(stamp_policy(policy, previous, self._clock), self.path)
