"""Tests for the dataguard CLI.

Commands run through click's CliRunner with config and policy paths
redirected into a temporary directory.
Uses AAA pattern (Arrange-Act-Assert) for clarity.
"""

import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from dataguard.cli import cli
from dataguard.cli.commands.negotiate import EXIT_DENIED
from dataguard.config import AppConfig
from dataguard.pdp.policy import Policy
from dataguard.utils.policy import load_policy, save_policy

WALLET = "0x" + "a" * 40

# Modules that look up the config and policy locations at call time
_CONFIG_PATH_USERS = ["init", "config", "negotiate", "serve"]
_POLICY_PATH_USERS = ["init", "policy", "negotiate", "serve"]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def paths(tmp_path: Path) -> Iterator[tuple[Path, Path]]:
    """Redirect config.json and policy.json into tmp_path."""
    config_path = tmp_path / "app" / "config.json"
    policy_path = tmp_path / "app" / "policy.json"
    patches = [
        patch(f"dataguard.cli.commands.{module}.get_config_path", return_value=config_path)
        for module in _CONFIG_PATH_USERS
    ] + [
        patch(f"dataguard.cli.commands.{module}.get_policy_path", return_value=policy_path)
        for module in _POLICY_PATH_USERS
    ]
    for p in patches:
        p.start()
    yield config_path, policy_path
    for p in patches:
        p.stop()


@pytest.fixture
def policy_file(paths: tuple[Path, Path]) -> Path:
    """A policy with a wallet set, and no config file."""
    _, policy_path = paths
    save_policy(Policy(wallet_address=WALLET), policy_path)
    return policy_path


class TestMain:
    """Tests for the top-level group."""

    def test_version(self, runner: CliRunner) -> None:
        # Act
        result = runner.invoke(cli, ["--version"])

        # Assert
        assert result.exit_code == 0
        assert result.output.strip() == "dataguard 0.1.0"

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        # Act
        result = runner.invoke(cli, ["-h"])

        # Assert
        assert result.exit_code == 0
        for command in ("config", "init", "negotiate", "policy", "quote", "serve"):
            assert command in result.output
        assert "Quick Start" in result.output


class TestInit:
    """Tests for dataguard init."""

    def test_creates_config_and_policy(self, runner: CliRunner, paths: tuple[Path, Path], tmp_path: Path) -> None:
        # Arrange
        config_path, policy_path = paths

        # Act
        result = runner.invoke(cli, ["init", "--wallet", WALLET, "--log-dir", str(tmp_path / "logs")])

        # Assert
        assert result.exit_code == 0, result.output
        assert "Config written" in result.output
        assert load_policy(policy_path).wallet_address == WALLET
        assert AppConfig.load_from_files(config_path).logging.log_dir == str(tmp_path / "logs")
        assert "No wallet set" not in result.output

    def test_without_wallet_prints_hint(self, runner: CliRunner, paths: tuple[Path, Path]) -> None:
        # Act
        result = runner.invoke(cli, ["init"])

        # Assert
        assert result.exit_code == 0
        assert "No wallet set" in result.output

    def test_refuses_to_overwrite(self, runner: CliRunner, paths: tuple[Path, Path]) -> None:
        # Arrange
        runner.invoke(cli, ["init"])

        # Act
        result = runner.invoke(cli, ["init"])

        # Assert
        assert result.exit_code == 1
        assert "Already exists" in result.output

    def test_force_overwrites(self, runner: CliRunner, paths: tuple[Path, Path]) -> None:
        # Arrange
        _, policy_path = paths
        runner.invoke(cli, ["init"])

        # Act
        result = runner.invoke(cli, ["init", "--force", "--wallet", WALLET])

        # Assert
        assert result.exit_code == 0
        assert load_policy(policy_path).wallet_address == WALLET

    def test_invalid_wallet(self, runner: CliRunner, paths: tuple[Path, Path]) -> None:
        # Arrange
        config_path, _ = paths

        # Act
        result = runner.invoke(cli, ["init", "--wallet", "0x123"])

        # Assert
        assert result.exit_code == 1
        assert "40 hex characters" in result.output
        assert not config_path.exists()

    def test_invalid_mail_url(self, runner: CliRunner, paths: tuple[Path, Path]) -> None:
        # Act
        result = runner.invoke(cli, ["init", "--mail-url", "mail.example.com"])

        # Assert
        assert result.exit_code == 1
        assert "invalid configuration" in result.output


class TestConfigCommands:
    """Tests for dataguard config."""

    def test_path(self, runner: CliRunner, paths: tuple[Path, Path]) -> None:
        # Arrange
        config_path, _ = paths

        # Act
        result = runner.invoke(cli, ["config", "path"])

        # Assert
        assert result.exit_code == 0
        assert str(config_path) in result.output

    def test_show_missing(self, runner: CliRunner, paths: tuple[Path, Path]) -> None:
        # Act
        result = runner.invoke(cli, ["config", "show"])

        # Assert
        assert result.exit_code == 1
        assert "dataguard init" in result.output

    def test_show_json(self, runner: CliRunner, paths: tuple[Path, Path]) -> None:
        # Arrange
        runner.invoke(cli, ["init", "--mail-url", "https://mail.example.com"])

        # Act
        result = runner.invoke(cli, ["config", "show", "--json"])

        # Assert
        assert result.exit_code == 0
        assert json.loads(result.output)["mail_service"]["base_url"] == "https://mail.example.com"


class TestPolicyCommands:
    """Tests for dataguard policy."""

    def test_show(self, runner: CliRunner, policy_file: Path) -> None:
        # Act
        result = runner.invoke(cli, ["policy", "show"])

        # Assert
        assert result.exit_code == 0
        assert "$0.100 USDC" in result.output
        assert WALLET in result.output

    def test_show_missing(self, runner: CliRunner, paths: tuple[Path, Path]) -> None:
        # Act
        result = runner.invoke(cli, ["policy", "show"])

        # Assert
        assert result.exit_code == 1

    def test_validate(self, runner: CliRunner, policy_file: Path) -> None:
        # Act
        result = runner.invoke(cli, ["policy", "validate"])

        # Assert
        assert result.exit_code == 0
        assert "Policy valid" in result.output
        assert "subscription, delivery" in result.output

    def test_validate_warns_without_wallet(self, runner: CliRunner, paths: tuple[Path, Path]) -> None:
        # Arrange
        _, policy_path = paths
        save_policy(Policy(), policy_path)

        # Act
        result = runner.invoke(cli, ["policy", "validate"])

        # Assert
        assert result.exit_code == 0
        assert "wallet_address is not set" in result.output

    def test_validate_invalid_file(self, runner: CliRunner, tmp_path: Path) -> None:
        # Arrange
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"max_email_age": "forever"}))

        # Act
        result = runner.invoke(cli, ["policy", "validate", "--path", str(path)])

        # Assert
        assert result.exit_code == 1
        assert "max_email_age" in result.output

    def test_set_flag(self, runner: CliRunner, policy_file: Path) -> None:
        # Act
        result = runner.invoke(cli, ["policy", "set", "allow_purchase_proof", "true"])

        # Assert
        assert result.exit_code == 0, result.output
        assert "(v2)" in result.output
        assert load_policy(policy_file).allow_purchase_proof is True

    def test_set_nested_price(self, runner: CliRunner, policy_file: Path) -> None:
        # Act
        result = runner.invoke(cli, ["policy", "set", "pricing.delivery", "0.2"])

        # Assert
        assert result.exit_code == 0
        saved = load_policy(policy_file)
        assert saved.pricing.delivery == 0.2
        assert saved.pricing.purchase == 0.25

    def test_set_negative_value_is_not_an_option(self, runner: CliRunner, policy_file: Path) -> None:
        """A value starting with a dash is passed through as the VALUE argument."""
        # Act
        result = runner.invoke(cli, ["policy", "set", "pricing.delivery", "-0.5"])

        # Assert
        assert result.exit_code == 0, result.output
        assert load_policy(policy_file).pricing.delivery == -0.5

    def test_set_string_value(self, runner: CliRunner, policy_file: Path) -> None:
        # Arrange
        other_wallet = "0x" + "b" * 40

        # Act
        result = runner.invoke(cli, ["policy", "set", "wallet_address", other_wallet])

        # Assert
        assert result.exit_code == 0
        assert load_policy(policy_file).wallet_address == other_wallet

    @pytest.mark.parametrize("key,value", [("unknown_field", "1"), ("max_email_age", "-1")])
    def test_set_invalid(self, runner: CliRunner, policy_file: Path, key: str, value: str) -> None:
        # Act
        result = runner.invoke(cli, ["policy", "set", key, value])

        # Assert
        assert result.exit_code == 1
        assert "Invalid policy" in result.output
        assert load_policy(policy_file).version == "v1"


class TestNegotiateCommands:
    """Tests for dataguard negotiate and quote."""

    def test_accepted(self, runner: CliRunner, policy_file: Path) -> None:
        # Act
        result = runner.invoke(cli, ["negotiate", "-c", "delivery"])

        # Assert
        assert result.exit_code == 0, result.output
        assert "Accepted at $0.100 USDC" in result.output

    def test_clamped_request_shows_note(self, runner: CliRunner, policy_file: Path) -> None:
        # Act
        result = runner.invoke(cli, ["negotiate", "-c", "subscription", "--max-emails", "20"])

        # Assert
        assert result.exit_code == 0
        assert "Accepted at $0.060 USDC" in result.output
        assert "limit to 10 records maximum" in result.output

    def test_denied_with_counter_offer(self, runner: CliRunner, policy_file: Path) -> None:
        # Act
        result = runner.invoke(cli, ["negotiate", "-c", "delivery", "--include-bodies"])

        # Assert
        assert result.exit_code == EXIT_DENIED
        assert "Denied: body access requested but policy requires redaction" in result.output
        assert "Counter-offer: $0.150 USDC with redacted bodies only" in result.output

    def test_json_output(self, runner: CliRunner, policy_file: Path) -> None:
        # Act
        result = runner.invoke(cli, ["negotiate", "-c", "financial", "--json"])

        # Assert
        assert result.exit_code == EXIT_DENIED
        data = json.loads(result.output)
        assert data["accepted"] is False
        assert data["reason"] == "financial access disabled"

    def test_unknown_category_is_usage_error(self, runner: CliRunner, policy_file: Path) -> None:
        # Act
        result = runner.invoke(cli, ["negotiate", "-c", "travel"])

        # Assert
        assert result.exit_code == 2
        assert "Invalid value" in result.output

    def test_negative_count_is_rejected(self, runner: CliRunner, policy_file: Path) -> None:
        # Act
        result = runner.invoke(cli, ["negotiate", "-c", "delivery", "--max-emails", "-1"])

        # Assert
        assert result.exit_code == 1
        assert "max_emails" in result.output

    def test_missing_policy(self, runner: CliRunner, paths: tuple[Path, Path]) -> None:
        # Act
        result = runner.invoke(cli, ["negotiate", "-c", "delivery"])

        # Assert
        assert result.exit_code == 1
        assert "dataguard init" in result.output

    def test_writes_audit_log_when_configured(
        self, runner: CliRunner, paths: tuple[Path, Path], tmp_path: Path
    ) -> None:
        # Arrange
        log_dir = tmp_path / "logs"
        runner.invoke(cli, ["init", "--wallet", WALLET, "--log-dir", str(log_dir)])

        # Act
        result = runner.invoke(cli, ["negotiate", "-c", "delivery"])

        # Assert
        assert result.exit_code == 0
        log_file = log_dir / "dataguard_logs" / "audit" / "decisions.jsonl"
        [line] = log_file.read_text().splitlines()
        assert json.loads(line)["decision"] == "accept"

    def test_quote_breakdown(self, runner: CliRunner, policy_file: Path) -> None:
        # Act
        result = runner.invoke(cli, ["quote", "-c", "subscription", "--max-emails", "20"])

        # Assert
        assert result.exit_code == 0
        assert "x1.2" in result.output
        assert "$0.060 USDC" in result.output

    def test_quote_json(self, runner: CliRunner, policy_file: Path) -> None:
        # Act
        result = runner.invoke(cli, ["quote", "-c", "delivery", "--include-bodies", "--json"])

        # Assert
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["privacy_multiplier"] == 1.5
        assert data["price"] == 0.15

    def test_quote_with_unset_pricing(self, runner: CliRunner, policy_file: Path) -> None:
        # Arrange
        save_policy(Policy(wallet_address=WALLET, pricing={"delivery": 0}), policy_file)

        # Act
        result = runner.invoke(cli, ["quote", "-c", "delivery"])

        # Assert
        assert result.exit_code == 1
        assert "pricing unset for delivery" in result.output


class TestServe:
    """Tests for dataguard serve."""

    def test_requires_config(self, runner: CliRunner, paths: tuple[Path, Path]) -> None:
        # Act
        result = runner.invoke(cli, ["serve"])

        # Assert
        assert result.exit_code == 1

    def test_runs_uvicorn_with_configured_address(
        self, runner: CliRunner, paths: tuple[Path, Path], tmp_path: Path
    ) -> None:
        # Arrange
        runner.invoke(cli, ["init", "--wallet", WALLET, "--log-dir", str(tmp_path / "logs")])

        # Act
        with patch("dataguard.cli.commands.serve.uvicorn.run") as run:
            result = runner.invoke(cli, ["serve", "--port", "9000"])

        # Assert
        assert result.exit_code == 0, result.output
        run.assert_called_once()
        _, kwargs = run.call_args
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 9000
        assert kwargs["log_level"] == "info"
