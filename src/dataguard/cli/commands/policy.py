"""Policy command group for dataguard CLI."""

from __future__ import annotations

__all__ = ["policy"]

import json
import sys
from pathlib import Path
from typing import Any

import click

from dataguard.constants import CATEGORIES
from dataguard.exceptions import RequestValidationError
from dataguard.payments import format_price, validate_wallet_address
from dataguard.pdp.policy import Policy
from dataguard.utils.policy import JsonFilePolicyStore, apply_policy_update, get_policy_path, load_policy

from ..styling import style_dim, style_error, style_header, style_label, style_success, style_warning


def _parse_value(raw: str) -> Any:
    """Parse a CLI value as JSON, falling back to the raw string.

    "true" → True, "0.2" → 0.2, "abc" → "abc".
    """
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _build_changes(key: str, value: Any) -> dict[str, Any]:
    """Turn "pricing.delivery" into {"pricing": {"delivery": value}}."""
    head, _, tail = key.partition(".")
    if tail:
        return {head: {tail: value}}
    return {head: value}


def _print_policy(policy_config: Policy) -> None:
    click.echo(style_header("Sharing"))
    click.echo(f"  {style_label('global')} {policy_config.global_data_sharing}")
    for category in CATEGORIES:
        allowed = getattr(policy_config, f"allow_{category}_proof")
        click.echo(f"  {style_label(category)} {'allowed' if allowed else 'denied'}")

    click.echo(style_header("Pricing"))
    for category in CATEGORIES:
        price = policy_config.pricing.for_category(category) or 0.0
        click.echo(f"  {style_label(category)} {format_price(price)}")

    click.echo(style_header("Privacy"))
    click.echo(f"  redact_email_bodies: {policy_config.redact_email_bodies}")
    click.echo(f"  redact_personal_info: {policy_config.redact_personal_info}")
    click.echo(f"  show_sender_info: {policy_config.show_sender_info}")
    click.echo(f"  show_subject_info: {policy_config.show_subject_info}")

    click.echo(style_header("Limits"))
    click.echo(f"  max_email_age: {policy_config.max_email_age} days")
    click.echo(f"  max_emails_per_request: {policy_config.max_emails_per_request}")

    click.echo(style_header("Payment"))
    wallet = policy_config.wallet_address or style_dim("(not set)")
    click.echo(f"  wallet_address: {wallet}")
    click.echo(f"  network: {policy_config.network}")

    updated = policy_config.last_updated.isoformat() if policy_config.last_updated else "never"
    click.echo(style_dim(f"Version {policy_config.version}, last updated {updated}"))


@click.group()
def policy() -> None:
    """Policy management commands."""
    pass


@policy.command("path")
def policy_path_cmd() -> None:
    """Show policy file path."""
    path = get_policy_path()
    click.echo(str(path))

    if not path.exists():
        click.echo("(file does not exist - run 'dataguard init' to create)", err=True)


@policy.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def policy_show(as_json: bool) -> None:
    """Display current policy."""
    try:
        policy_config = load_policy(get_policy_path())
    except (FileNotFoundError, ValueError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(policy_config.model_dump(mode="json"), indent=2))
        return
    _print_policy(policy_config)


@policy.command("validate")
@click.option(
    "--path",
    "-p",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Validate file at this path instead of the default location",
)
def policy_validate(path: Path | None) -> None:
    """Validate policy file.

    Exit codes:
        0: Policy is valid
        1: Policy is invalid or not found
    """
    policy_path = path or get_policy_path()

    try:
        policy_config = load_policy(policy_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    click.echo(style_success(f"Policy valid: {policy_path}"))
    enabled = [c for c in CATEGORIES if getattr(policy_config, f"allow_{c}_proof")]
    click.echo(f"  Shared categories: {', '.join(enabled) if enabled else 'none'}")
    if not validate_wallet_address(policy_config.wallet_address):
        click.echo(style_warning("wallet_address is not set; negotiations will be denied"))


@policy.command("set", context_settings={"ignore_unknown_options": True})
@click.argument("key")
@click.argument("value")
def policy_set(key: str, value: str) -> None:
    """Set one policy field and save.

    KEY is a field name, or pricing.<category> for base prices.
    VALUE is parsed as JSON when possible (true, 0.2, 30). Values starting
    with a dash are taken as values, not options.

    \b
    Examples:
      dataguard policy set allow_purchase_proof true
      dataguard policy set pricing.delivery 0.2
      dataguard policy set wallet_address 0xabc...
    """
    store = JsonFilePolicyStore(get_policy_path())
    try:
        current = load_policy(store.path)
        updated = apply_policy_update(current, _build_changes(key, _parse_value(value)))
    except (FileNotFoundError, ValueError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)
    except RequestValidationError as e:
        click.echo(style_error(e.message), err=True)
        sys.exit(1)

    store.set_policy(updated)
    saved = store.get_policy()
    click.echo(style_success(f"Policy updated: {key} = {value} ({saved.version})"))
