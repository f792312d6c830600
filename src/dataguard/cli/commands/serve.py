"""Serve command for dataguard CLI - run the HTTP API with uvicorn."""

from __future__ import annotations

__all__ = ["serve"]

import logging
import sys

import click
import uvicorn

from dataguard.api.server import create_api_app
from dataguard.config import AppConfig, get_config_path
from dataguard.runtime import build_event_logger, build_service, configure_logging
from dataguard.utils.policy import JsonFilePolicyStore, get_policy_path

from ..styling import style_error

logger = logging.getLogger(__name__)


@click.command()
@click.option("--host", default=None, help="Bind host (overrides config)")
@click.option("--port", default=None, type=int, help="Bind port (overrides config)")
def serve(host: str | None, port: int | None) -> None:
    """Run the HTTP API.

    Requires 'dataguard init'. Negotiations are logged to
    <log_dir>/dataguard_logs/audit/decisions.jsonl.
    """
    policy_path = get_policy_path()
    try:
        app_config = AppConfig.load_from_files(get_config_path())
    except (FileNotFoundError, ValueError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)
    if not policy_path.exists():
        click.echo(style_error(f"Policy file not found at {policy_path}."), err=True)
        click.echo("  Run 'dataguard init' to create one.", err=True)
        sys.exit(1)

    configure_logging(app_config)
    try:
        event_logger = build_event_logger(app_config)
    except OSError as e:
        click.echo(style_error(f"Cannot open audit log: {e}"), err=True)
        sys.exit(1)

    service = build_service(
        app_config,
        policy_store=JsonFilePolicyStore(policy_path),
        event_logger=event_logger,
    )
    app = create_api_app(service)

    bind_host = host or app_config.api.host
    bind_port = port or app_config.api.port
    logger.info("Serving dataguard API on %s:%s", bind_host, bind_port)
    uvicorn.run(app, host=bind_host, port=bind_port, log_level=app_config.logging.log_level.lower())
