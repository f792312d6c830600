"""Init command for dataguard CLI.

Creates config.json and policy.json in the app directory.
"""

from __future__ import annotations

__all__ = ["init"]

import sys

import click

from dataguard.config import DEFAULT_LOG_DIR, AppConfig, LoggingConfig, MailServiceConfig, get_config_path
from dataguard.constants import DEFAULT_MAIL_SERVICE_URL
from dataguard.payments import validate_wallet_address
from dataguard.pdp.policy import create_default_policy
from dataguard.utils.policy import get_policy_path, save_policy

from ..styling import style_dim, style_error, style_success


@click.command()
@click.option("--wallet", default=None, help="Payout wallet address (0x + 40 hex characters)")
@click.option("--mail-url", default=DEFAULT_MAIL_SERVICE_URL, show_default=True, help="Mail service base URL")
@click.option("--log-dir", default=DEFAULT_LOG_DIR, show_default=True, help="Base directory for logs")
@click.option("--force", is_flag=True, help="Overwrite existing files")
def init(wallet: str | None, mail_url: str, log_dir: str, force: bool) -> None:
    """Initialize configuration and a default policy.

    The default policy shares subscription and delivery proofs only, and
    redacts bodies and personal info.

    Exit codes:
        0: Files created
        1: Files exist (without --force) or invalid input
    """
    config_path = get_config_path()
    policy_path = get_policy_path()

    existing = [p for p in (config_path, policy_path) if p.exists()]
    if existing and not force:
        for path in existing:
            click.echo(style_error(f"Already exists: {path}"), err=True)
        click.echo("  Use --force to overwrite.", err=True)
        sys.exit(1)

    if wallet is not None and not validate_wallet_address(wallet):
        click.echo(style_error("Error: --wallet must be 0x followed by 40 hex characters"), err=True)
        sys.exit(1)

    try:
        config = AppConfig(
            logging=LoggingConfig(log_dir=log_dir),
            mail_service=MailServiceConfig(base_url=mail_url),
        )
    except ValueError as e:
        click.echo(style_error(f"Error: invalid configuration: {e}"), err=True)
        sys.exit(1)

    policy = create_default_policy()
    if wallet is not None:
        policy = policy.model_copy(update={"wallet_address": wallet})

    config.save_to_file(config_path)
    save_policy(policy, policy_path)

    click.echo(style_success(f"Config written: {config_path}"))
    click.echo(style_success(f"Policy written: {policy_path}"))
    if wallet is None:
        click.echo(
            style_dim("No wallet set. Negotiations will be denied until you run:"),
        )
        click.echo(style_dim("  dataguard policy set wallet_address 0x..."))
