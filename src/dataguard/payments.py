"""Payment request construction for accepted negotiations.

The engine emits a priced, accepted result. Turning it into a payment is
done here; settling it is delegated to an injected PaymentService.

Provides:
- validate_wallet_address: 0x-prefixed 40-hex payout address check
- create_payment_request: build the request handed to settlement
- format_price: display helper ("$0.100 USDC")
- get_network_config: chain parameters per supported network
"""

from __future__ import annotations

__all__ = [
    "NetworkConfig",
    "PaymentReceipt",
    "PaymentRequest",
    "create_payment_request",
    "format_price",
    "get_network_config",
    "validate_wallet_address",
]

import re
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from dataguard.constants import PRICE_DECIMALS, WALLET_ADDRESS_PATTERN, Network
from dataguard.exceptions import ConfigurationError
from dataguard.utils.clock import Clock, utc_now

if TYPE_CHECKING:
    from dataguard.pdp.policy import Policy

_WALLET_RE = re.compile(WALLET_ADDRESS_PATTERN)


class NetworkConfig(BaseModel):
    """Chain parameters for a settlement network."""

    name: Network
    chain_id: int
    rpc_url: str
    facilitator_url: str
    usdc_address: str

    model_config = ConfigDict(frozen=True)


_NETWORKS: dict[str, NetworkConfig] = {
    "polygon": NetworkConfig(
        name="polygon",
        chain_id=137,
        rpc_url="https://polygon-rpc.com",
        facilitator_url="https://x402.org/facilitator",
        usdc_address="0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174",
    ),
    "polygon-mumbai": NetworkConfig(
        name="polygon-mumbai",
        chain_id=80001,
        rpc_url="https://rpc-mumbai.maticvigil.com",
        facilitator_url="https://x402.org/facilitator-mumbai",
        usdc_address="0xe6b8a5CF854791412c1f6EFC7CAf629f5Df1c747",
    ),
}


class PaymentRequest(BaseModel):
    """What settlement needs to charge an accepted negotiation.

    Attributes:
        category: Category the payment is for.
        price: Amount in USDC (positive).
        wallet_address: Payout address.
        facilitator_url: Facilitator endpoint.
        network: Settlement network.
        request_id: Correlation ID.
        timestamp: When the request was built.
    """

    category: str
    price: float = Field(gt=0)
    wallet_address: str
    facilitator_url: str
    network: Network
    request_id: str
    timestamp: datetime

    model_config = ConfigDict(frozen=True)


class PaymentReceipt(BaseModel):
    """Result of settlement, as reported by the PaymentService.

    Attributes:
        success: Whether settlement succeeded.
        payment_proof: Opaque proof from the facilitator.
        transaction_hash: On-chain transaction hash.
        error: Failure description.
    """

    success: bool
    payment_proof: str | None = None
    transaction_hash: str | None = None
    error: str | None = None

    model_config = ConfigDict(frozen=True)


def validate_wallet_address(address: str | None) -> bool:
    """Check for a 0x-prefixed, 40-hex-character address."""
    if not address:
        return False
    return _WALLET_RE.fullmatch(address) is not None


def format_price(price: float) -> str:
    """Format a price for display, e.g. "$0.100 USDC"."""
    return f"${price:.{PRICE_DECIMALS}f} USDC"


def get_network_config(network: Network) -> NetworkConfig:
    """Get chain parameters for a network.

    Raises:
        ConfigurationError: If the network is not supported.
    """
    try:
        return _NETWORKS[network]
    except KeyError:
        raise ConfigurationError(f"Unsupported network: {network}") from None


def create_payment_request(
    category: str,
    policy: Policy,
    price: float,
    request_id: str,
    clock: Clock = utc_now,
) -> PaymentRequest:
    """Build the payment request for an accepted negotiation.

    Args:
        category: Negotiated category.
        policy: Policy supplying payout address and network.
        price: Negotiated final price.
        request_id: Correlation ID.
        clock: Source of the request timestamp.

    Returns:
        PaymentRequest ready for settlement.

    Raises:
        ConfigurationError: If the price is not positive or the wallet
            address is invalid.
    """
    if price <= 0:
        raise ConfigurationError(f"No price set for category: {category}")
    if not validate_wallet_address(policy.wallet_address):
        raise ConfigurationError("invalid payment configuration")

    facilitator = policy.facilitator_url or get_network_config(policy.network).facilitator_url
    return PaymentRequest(
        category=category,
        price=price,
        wallet_address=policy.wallet_address,
        facilitator_url=facilitator,
        network=policy.network,
        request_id=request_id,
        timestamp=clock(),
    )
