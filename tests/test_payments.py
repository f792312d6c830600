"""Unit tests for payment request construction.

Uses AAA pattern (Arrange-Act-Assert) for clarity.
"""

from datetime import datetime, timezone

import pytest

from dataguard.exceptions import ConfigurationError
from dataguard.payments import (
    create_payment_request,
    format_price,
    get_network_config,
    validate_wallet_address,
)
from dataguard.pdp.policy import Policy

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
WALLET = "0x" + "AbC123" * 6 + "abcd"


class TestWalletValidation:
    """Tests for payout address validation."""

    @pytest.mark.parametrize("address", [WALLET, "0x" + "0" * 40, "0x" + "F" * 40])
    def test_valid_addresses(self, address: str) -> None:
        assert validate_wallet_address(address) is True

    @pytest.mark.parametrize(
        "address",
        [None, "", "0x", "0x" + "a" * 39, "0x" + "a" * 41, "0X" + "a" * 40, "0x" + "z" * 40, " 0x" + "a" * 40],
    )
    def test_invalid_addresses(self, address: str | None) -> None:
        assert validate_wallet_address(address) is False


class TestFormatting:
    """Tests for display helpers."""

    @pytest.mark.parametrize("price,expected", [(0.1, "$0.100 USDC"), (0.06, "$0.060 USDC"), (1.5, "$1.500 USDC")])
    def test_format_price(self, price: float, expected: str) -> None:
        assert format_price(price) == expected

    def test_network_config(self) -> None:
        # Act
        polygon = get_network_config("polygon")
        mumbai = get_network_config("polygon-mumbai")

        # Assert
        assert polygon.chain_id == 137
        assert mumbai.chain_id == 80001

    def test_unsupported_network(self) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported network"):
            get_network_config("ethereum")  # type: ignore[arg-type]


class TestCreatePaymentRequest:
    """Tests for building payment requests."""

    def test_builds_request_from_policy(self) -> None:
        # Arrange
        policy = Policy(wallet_address=WALLET, network="polygon-mumbai")

        # Act
        request = create_payment_request("delivery", policy, 0.1, request_id="req-1", clock=lambda: NOW)

        # Assert
        assert request.category == "delivery"
        assert request.price == 0.1
        assert request.wallet_address == WALLET
        assert request.network == "polygon-mumbai"
        assert request.facilitator_url == policy.facilitator_url
        assert request.request_id == "req-1"
        assert request.timestamp == NOW

    def test_empty_facilitator_falls_back_to_network_default(self) -> None:
        # Arrange
        policy = Policy(wallet_address=WALLET, facilitator_url="", network="polygon-mumbai")

        # Act
        request = create_payment_request("delivery", policy, 0.1, request_id="req-1")

        # Assert
        assert request.facilitator_url == "https://x402.org/facilitator-mumbai"

    @pytest.mark.parametrize("price", [0.0, -1.0])
    def test_non_positive_price_is_rejected(self, price: float) -> None:
        with pytest.raises(ConfigurationError, match="No price set for category: delivery"):
            create_payment_request("delivery", Policy(wallet_address=WALLET), price, request_id="x")

    def test_invalid_wallet_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="invalid payment configuration"):
            create_payment_request("delivery", Policy(), 0.1, request_id="x")
