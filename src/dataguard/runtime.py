"""Runtime wiring - build the service graph from AppConfig.

Used by `dataguard serve` and the one-shot CLI commands. Tests build the
graph by hand with fakes instead.
"""

from __future__ import annotations

__all__ = [
    "build_engine",
    "build_event_logger",
    "build_service",
    "configure_logging",
]

import logging
from pathlib import Path

from dataguard.config import AppConfig
from dataguard.pdp.engine import NegotiationEngine
from dataguard.pdp.protocol import PaymentService, PolicyStore, RecordSource
from dataguard.pep.ledger import TransactionLedger
from dataguard.service import DataGuardService
from dataguard.sources.mail import MailServiceClient
from dataguard.telemetry.audit.decision_logger import (
    NegotiationEventLogger,
    create_decision_logger,
    get_decisions_log_path,
)
from dataguard.utils.clock import Clock, utc_now
from dataguard.utils.policy.policy_helpers import JsonFilePolicyStore


def configure_logging(config: AppConfig) -> None:
    """Configure console logging at the configured level."""
    logging.basicConfig(
        level=getattr(logging, config.logging.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_event_logger(config: AppConfig) -> NegotiationEventLogger:
    """Create the decisions.jsonl audit logger under config.logging.log_dir."""
    log_path = get_decisions_log_path(Path(config.logging.log_dir))
    return NegotiationEventLogger(create_decision_logger(log_path))


def build_engine(
    config: AppConfig,
    *,
    event_logger: NegotiationEventLogger | None = None,
    clock: Clock = utc_now,
) -> NegotiationEngine:
    """Create an engine with a fresh ledger sized from config."""
    ledger = TransactionLedger(
        demand_capacity=config.ledger.demand_capacity,
        history_capacity=config.ledger.history_capacity,
        clock=clock,
    )
    return NegotiationEngine(
        ledger,
        clock=clock,
        require_wallet=config.negotiation.require_wallet,
        demand_window_seconds=config.ledger.demand_window_seconds,
        event_logger=event_logger,
    )


def build_service(
    config: AppConfig,
    *,
    policy_store: PolicyStore | None = None,
    record_source: RecordSource | None = None,
    payment_service: PaymentService | None = None,
    event_logger: NegotiationEventLogger | None = None,
    clock: Clock = utc_now,
) -> DataGuardService:
    """Create the full service graph.

    Args:
        config: Application config.
        policy_store: Defaults to policy.json in the app directory.
        record_source: Defaults to the configured mail service.
        payment_service: Optional settlement capability.
        event_logger: Optional decisions.jsonl logger.
        clock: Source of "now".
    """
    if policy_store is None:
        policy_store = JsonFilePolicyStore(clock=clock)
    if record_source is None:
        record_source = MailServiceClient(
            base_url=config.mail_service.base_url,
            timeout=config.mail_service.timeout_seconds,
        )
    return DataGuardService(
        policy_store=policy_store,
        record_source=record_source,
        engine=build_engine(config, event_logger=event_logger, clock=clock),
        payment_service=payment_service,
        clock=clock,
    )
