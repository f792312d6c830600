"""Main CLI entry point for dataguard.

Commands:
    config     - Configuration management (show, path)
    init       - Create config.json and policy.json
    negotiate  - Negotiate a request against the current policy
    policy     - Policy management (show, path, validate, set)
    quote      - Price a request without negotiating
    serve      - Run the HTTP API

Subcommand help:
    dataguard COMMAND -h         Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli", "main"]

import sys

import click

from dataguard import __version__

from .commands.config import config
from .commands.init import init
from .commands.negotiate import negotiate, quote
from .commands.policy import policy
from .commands.serve import serve


class ReorderedGroup(click.Group):
    """Group that shows a quick start after the commands section."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        formatter.write(
            """
Quick Start:
  dataguard init --wallet 0x...       Create config and default policy
  dataguard policy set allow_purchase_proof true
  dataguard quote -c delivery --max-emails 20
  dataguard serve                     Run the HTTP API
"""
        )


@click.group(
    cls=ReorderedGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """dataguard: policy-gated data negotiation and redaction."""
    if version:
        click.echo(f"dataguard {__version__}")
        sys.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(config)
cli.add_command(init)
cli.add_command(negotiate)
cli.add_command(policy)
cli.add_command(quote)
cli.add_command(serve)


def main() -> None:
    """CLI entry point."""
    cli()
