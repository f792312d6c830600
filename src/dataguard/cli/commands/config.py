"""Config command group for dataguard CLI."""

from __future__ import annotations

__all__ = ["config"]

import json
import sys

import click

from dataguard.config import AppConfig, get_config_path

from ..styling import style_error, style_header


@click.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command("path")
def config_path_cmd() -> None:
    """Show config file path."""
    path = get_config_path()
    click.echo(str(path))

    if not path.exists():
        click.echo("(file does not exist - run 'dataguard init' to create)", err=True)


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def config_show(as_json: bool) -> None:
    """Display current configuration (defaults filled in)."""
    try:
        app_config = AppConfig.load_from_files(get_config_path())
    except (FileNotFoundError, ValueError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(app_config.model_dump(mode="json"), indent=2))
        return

    click.echo(style_header("Logging"))
    click.echo(f"  log_dir: {app_config.logging.log_dir}")
    click.echo(f"  log_level: {app_config.logging.log_level}")
    click.echo(style_header("Mail Service"))
    click.echo(f"  base_url: {app_config.mail_service.base_url}")
    click.echo(f"  timeout_seconds: {app_config.mail_service.timeout_seconds}")
    click.echo(style_header("Ledger"))
    click.echo(f"  demand_capacity: {app_config.ledger.demand_capacity}")
    click.echo(f"  history_capacity: {app_config.ledger.history_capacity}")
    click.echo(f"  demand_window_seconds: {app_config.ledger.demand_window_seconds}")
    click.echo(style_header("Negotiation"))
    click.echo(f"  require_wallet: {app_config.negotiation.require_wallet}")
    click.echo(style_header("API"))
    click.echo(f"  {app_config.api.host}:{app_config.api.port}")
