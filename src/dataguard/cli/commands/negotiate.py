"""Negotiate and quote commands for dataguard CLI.

Both run against a fresh, empty ledger, so the demand multiplier is 1.0.
Use the HTTP API (dataguard serve) for demand-aware pricing.
"""

from __future__ import annotations

__all__ = ["negotiate", "quote"]

import json
import sys
from collections.abc import Callable
from typing import Any

import click

from dataguard.config import AppConfig, get_config_path
from dataguard.constants import CATEGORIES
from dataguard.context import NegotiationRequest, parse_request
from dataguard.exceptions import ConfigurationError, RequestValidationError
from dataguard.payments import format_price
from dataguard.pdp.policy import Policy
from dataguard.runtime import build_engine, build_event_logger
from dataguard.utils.policy import get_policy_path, load_policy

from ..styling import style_dim, style_error, style_label, style_success

# Exit code for a denied negotiation (not an error)
EXIT_DENIED = 2


_REQUEST_OPTIONS = [
    click.option(
        "--category",
        "-c",
        required=True,
        type=click.Choice(CATEGORIES),
        help="Requested category",
    ),
    click.option("--max-age", default=30, show_default=True, type=int, help="Freshness in days"),
    click.option("--max-emails", default=10, show_default=True, type=int, help="Number of records"),
    click.option("--include-bodies", is_flag=True, help="Request full bodies"),
    click.option("--include-personal-info", is_flag=True, help="Request personal info"),
    click.option("--requester", default="cli", show_default=True, help="Requester ID"),
    click.option("--json", "as_json", is_flag=True, help="Output as JSON"),
]


def _request_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Apply the shared request options for negotiate and quote."""
    for option in reversed(_REQUEST_OPTIONS):
        func = option(func)
    return func


def _load_inputs(kwargs: dict[str, Any]) -> tuple[AppConfig, Policy, NegotiationRequest, bool]:
    """Load config, policy and the validated request, exiting on error.

    Returns:
        (config, policy, request, config_file_exists)
    """
    config_path = get_config_path()
    config_exists = config_path.exists()
    try:
        app_config = AppConfig.load_from_files(config_path) if config_exists else AppConfig()
        policy_config = load_policy(get_policy_path())
    except (FileNotFoundError, ValueError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    try:
        request = parse_request(
            {
                "category": kwargs["category"],
                "requester_id": kwargs["requester"],
                "requester_type": "human",
                "requested_data": {
                    "max_age": kwargs["max_age"],
                    "max_emails": kwargs["max_emails"],
                    "include_bodies": kwargs["include_bodies"],
                    "include_personal_info": kwargs["include_personal_info"],
                },
            }
        )
    except RequestValidationError as e:
        click.echo(style_error(e.message), err=True)
        sys.exit(1)

    return app_config, policy_config, request, config_exists


@click.command()
@_request_options
def negotiate(**kwargs: Any) -> None:
    """Negotiate a request against the current policy.

    The decision is written to the audit log when a config file exists.

    Exit codes:
        0: Accepted
        1: Error (missing policy, invalid input)
        2: Denied
    """
    app_config, policy_config, request, config_exists = _load_inputs(kwargs)

    event_logger = build_event_logger(app_config) if config_exists else None
    engine = build_engine(app_config, event_logger=event_logger)
    result = engine.negotiate(request, policy_config)

    if kwargs["as_json"]:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    elif result.accepted:
        assert result.final_price is not None and result.adjusted_policy is not None
        click.echo(style_success(f"Accepted at {format_price(result.final_price)}"))
        terms = result.adjusted_policy
        click.echo(f"  {style_label('max_age')} {terms.max_age} days")
        click.echo(f"  {style_label('max_count')} {terms.max_count}")
        click.echo(f"  {style_label('redact_bodies')} {terms.redact_bodies}")
        click.echo(f"  {style_label('redact_personal_info')} {terms.redact_personal_info}")
        for condition in result.conditions:
            click.echo(style_dim(f"  note: {condition}"))
    else:
        click.echo(style_error(f"Denied: {result.reason}"))
        if result.counter_offer is not None:
            offer = result.counter_offer
            click.echo(f"  Counter-offer: {format_price(offer.price)} with {', '.join(offer.conditions)}")

    if not result.accepted:
        sys.exit(EXIT_DENIED)


@click.command()
@_request_options
def quote(**kwargs: Any) -> None:
    """Price a request without negotiating or recording it."""
    app_config, policy_config, request, _ = _load_inputs(kwargs)

    engine = build_engine(app_config)
    try:
        price_quote = engine.quote(request, policy_config)
    except ConfigurationError as e:
        click.echo(style_error(e.message), err=True)
        sys.exit(1)

    if kwargs["as_json"]:
        data = {
            "category": request.category,
            "base_price": price_quote.base_price,
            "demand_multiplier": price_quote.demand_multiplier,
            "privacy_multiplier": price_quote.privacy_multiplier,
            "volume_multiplier": price_quote.volume_multiplier,
            "price": price_quote.price,
        }
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"{style_label('Base')} {format_price(price_quote.base_price)}")
    click.echo(f"{style_label('Demand')} x{price_quote.demand_multiplier:g}")
    click.echo(f"{style_label('Privacy')} x{price_quote.privacy_multiplier:g}")
    click.echo(f"{style_label('Volume')} x{price_quote.volume_multiplier:g}")
    click.echo(f"{style_label('Price')} {format_price(price_quote.price)}")
