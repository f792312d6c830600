"""Application configuration for dataguard.

Defines configuration models for logging, the mail service, the ledger,
negotiation behaviour and the HTTP API. User creates config via
`dataguard init`. Config is stored at the OS-appropriate location (via
click.get_app_dir), log_dir is user-specified.

The user's data-sharing Policy is NOT part of this file; it lives in
policy.json next to it (see utils/policy).

Example usage:
    # Load from config file
    config = AppConfig.load_from_files(config_path)

    # Save new configuration
    config.save_to_file(config_path)
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_LOG_DIR",
    "ApiConfig",
    "AppConfig",
    "LedgerConfig",
    "LoggingConfig",
    "MailServiceConfig",
    "NegotiationConfig",
    "get_config_path",
]

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from dataguard.constants import (
    DEFAULT_API_HOST,
    DEFAULT_API_PORT,
    DEFAULT_DEMAND_CAPACITY,
    DEFAULT_HISTORY_CAPACITY,
    DEFAULT_MAIL_SERVICE_URL,
    DEFAULT_MAIL_TIMEOUT_SECONDS,
    DEMAND_WINDOW_SECONDS,
    MAX_MAIL_TIMEOUT_SECONDS,
    MIN_MAIL_TIMEOUT_SECONDS,
)
from dataguard.utils.file_helpers import (
    atomic_write_json,
    get_app_dir,
    load_validated_json,
    require_file_exists,
)


def _get_platform_log_dir() -> str:
    """Get platform-appropriate base log directory following OS conventions.

    Platform conventions:
        - macOS: ~/Library/Logs
        - Linux: $XDG_STATE_HOME (~/.local/state)
        - Windows: ~/AppData/Local
    """
    if sys.platform == "darwin":
        return "~/Library/Logs"
    elif sys.platform == "win32":
        return "~/AppData/Local"
    else:
        return os.environ.get("XDG_STATE_HOME", "~/.local/state")


DEFAULT_LOG_DIR = _get_platform_log_dir()


def get_config_path() -> Path:
    """Get the full path to the config file."""
    return get_app_dir() / "config.json"


class LoggingConfig(BaseModel):
    """Logging configuration settings.

    Logs are stored under <log_dir>/dataguard_logs/:
        <log_dir>/
        └── dataguard_logs/
            └── audit/
                └── decisions.jsonl     # Every negotiation outcome

    Attributes:
        log_dir: Base directory for logs.
        log_level: Console logging level (DEBUG or INFO). Decision logs are
            written regardless.
    """

    log_dir: str = Field(default=DEFAULT_LOG_DIR, min_length=1)
    log_level: Literal["DEBUG", "INFO"] = "INFO"


class MailServiceConfig(BaseModel):
    """Mail service connection.

    Attributes:
        base_url: Service root; records are fetched from {base_url}/api/emails.
        timeout_seconds: Per-request timeout.
    """

    base_url: str = Field(default=DEFAULT_MAIL_SERVICE_URL, min_length=1, pattern=r"^https?://")
    timeout_seconds: int = Field(
        default=DEFAULT_MAIL_TIMEOUT_SECONDS,
        ge=MIN_MAIL_TIMEOUT_SECONDS,
        le=MAX_MAIL_TIMEOUT_SECONDS,
    )


class LedgerConfig(BaseModel):
    """Transaction ledger sizing.

    Attributes:
        demand_capacity: Entries kept per category for demand statistics.
        history_capacity: Entries kept globally for user-facing history.
        demand_window_seconds: Trailing window for the demand multiplier.
    """

    demand_capacity: int = Field(default=DEFAULT_DEMAND_CAPACITY, gt=0)
    history_capacity: int = Field(default=DEFAULT_HISTORY_CAPACITY, gt=0)
    demand_window_seconds: int = Field(default=DEMAND_WINDOW_SECONDS, gt=0)


class NegotiationConfig(BaseModel):
    """Negotiation behaviour.

    Attributes:
        require_wallet: Deny when the policy has no valid payout address.
    """

    require_wallet: bool = True


class ApiConfig(BaseModel):
    """HTTP API bind address."""

    host: str = Field(default=DEFAULT_API_HOST, min_length=1)
    port: int = Field(default=DEFAULT_API_PORT, ge=1, le=65535)


class AppConfig(BaseModel):
    """Main application configuration for dataguard.

    Every section has defaults, so `{}` is a valid config.

    Attributes:
        logging: Logging configuration.
        mail_service: Record source connection.
        ledger: Ledger sizing.
        negotiation: Negotiation behaviour.
        api: HTTP API bind address.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    mail_service: MailServiceConfig = Field(default_factory=MailServiceConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    negotiation: NegotiationConfig = Field(default_factory=NegotiationConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to JSON file atomically.

        Creates parent directories with secure permissions.

        Args:
            config_path: Path where the config JSON file should be saved.
        """
        atomic_write_json(config_path, self.model_dump(mode="json"))

    @classmethod
    def load_from_files(cls, config_path: Path) -> "AppConfig":
        """Load configuration from JSON file.

        Args:
            config_path: Path to the config JSON file.

        Returns:
            AppConfig instance with loaded configuration.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValueError: If config file is invalid.
        """
        require_file_exists(config_path, file_type="configuration")
        return load_validated_json(
            config_path,
            cls,
            file_type="config",
            recovery_hint="Run 'dataguard init --force' to reconfigure.",
        )
