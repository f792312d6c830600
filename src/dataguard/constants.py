"""Application-wide constants for dataguard.

Constants that define engine behavior.
For user-configurable settings per deployment, see config.py.
For user-owned data-sharing settings, see pdp/policy.py.
"""

from typing import Literal, get_args

__all__ = [
    # Application identity
    "APP_NAME",
    # Categories
    "Category",
    "CATEGORIES",
    # Classifier keyword tables
    "SUBJECT_KEYWORDS",
    "SUBJECT_OR_SENDER_KEYWORDS",
    "SENDER_KEYWORDS",
    # Pricing
    "DEFAULT_BASE_PRICES",
    "DEMAND_STEP",
    "DEMAND_CAP",
    "BODY_PRIVACY_SURCHARGE",
    "PERSONAL_INFO_PRIVACY_SURCHARGE",
    "VOLUME_BASELINE",
    "VOLUME_STEP",
    "VOLUME_CAP",
    "PRICE_DECIMALS",
    # Ledger
    "DEFAULT_DEMAND_CAPACITY",
    "DEFAULT_HISTORY_CAPACITY",
    "DEMAND_WINDOW_SECONDS",
    "ANALYTICS_WINDOW_SECONDS",
    "HIGH_DEMAND_THRESHOLD",
    # Redaction
    "REDACTION_MARKER",
    # Payments
    "WALLET_ADDRESS_PATTERN",
    "Network",
    "NETWORKS",
    # Data source
    "DEFAULT_MAIL_SERVICE_URL",
    "DEFAULT_MAIL_TIMEOUT_SECONDS",
    "MIN_MAIL_TIMEOUT_SECONDS",
    "MAX_MAIL_TIMEOUT_SECONDS",
    # Management API
    "DEFAULT_API_HOST",
    "DEFAULT_API_PORT",
    # Versioning
    "INITIAL_VERSION",
]

# =============================================================================
# Application Identity
# =============================================================================

APP_NAME: str = "dataguard"

# =============================================================================
# Categories
# =============================================================================

# Closed world: anything outside this set is a validation error at the boundary
Category = Literal["subscription", "delivery", "purchase", "financial"]
CATEGORIES: tuple[str, ...] = get_args(Category)

# =============================================================================
# Classifier Keyword Tables (case-insensitive substring match)
# =============================================================================

# Matched against the subject line only
SUBJECT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "subscription": (),
    "delivery": ("delivered", "delivery", "shipped", "tracking", "package", "parcel"),
    "purchase": ("order", "receipt", "invoice", "payment", "purchase", "billing"),
    "financial": ("statement", "bank", "transaction", "balance", "credit card", "transfer", "tax"),
}

# Matched against subject OR sender
SUBJECT_OR_SENDER_KEYWORDS: dict[str, tuple[str, ...]] = {
    "subscription": ("unsubscribe", "subscription", "newsletter", "digest", "weekly", "monthly"),
    "delivery": (),
    "purchase": (),
    "financial": (),
}

# Matched against the sender only
SENDER_KEYWORDS: dict[str, tuple[str, ...]] = {
    "subscription": ("newsletter", "digest", "weekly", "monthly", "updates"),
    "delivery": ("amazon", "dhl", "ups", "fedex", "usps", "flipkart", "myntra"),
    "purchase": (),
    "financial": ("bank", "paypal", "chase", "wellsfargo", "citi", "stripe"),
}

# =============================================================================
# Pricing
# =============================================================================

# USDC per request, overridable per policy
DEFAULT_BASE_PRICES: dict[str, float] = {
    "subscription": 0.05,
    "delivery": 0.10,
    "purchase": 0.25,
    "financial": 0.50,
}

# Demand: +10% per recent same-category request, capped at 2x
DEMAND_STEP: float = 0.1
DEMAND_CAP: float = 2.0

# Privacy surcharges are additive inside the privacy multiplier
BODY_PRIVACY_SURCHARGE: float = 0.5
PERSONAL_INFO_PRIVACY_SURCHARGE: float = 0.3

# Volume: +20% per 10 records above the first 10, capped at 2x
VOLUME_BASELINE: int = 10
VOLUME_STEP: float = 0.2
VOLUME_CAP: float = 2.0

PRICE_DECIMALS: int = 3

# =============================================================================
# Transaction Ledger
# =============================================================================

# Per-category entries kept for demand statistics
DEFAULT_DEMAND_CAPACITY: int = 100

# Global entries kept for user-facing history
DEFAULT_HISTORY_CAPACITY: int = 50

# Trailing window for the demand multiplier (1 hour)
DEMAND_WINDOW_SECONDS: int = 60 * 60

# Trailing window for pricing analytics (24 hours)
ANALYTICS_WINDOW_SECONDS: int = 24 * 60 * 60

# More than this many requests in the analytics window is "high" demand
HIGH_DEMAND_THRESHOLD: int = 10

# =============================================================================
# Redaction
# =============================================================================

REDACTION_MARKER: str = "[REDACTED]"

# =============================================================================
# Payments
# =============================================================================

WALLET_ADDRESS_PATTERN: str = r"^0x[a-fA-F0-9]{40}$"

Network = Literal["polygon", "polygon-mumbai"]
NETWORKS: tuple[str, ...] = get_args(Network)

# =============================================================================
# Data Source (mail service)
# =============================================================================

DEFAULT_MAIL_SERVICE_URL: str = "http://localhost:3000"
DEFAULT_MAIL_TIMEOUT_SECONDS: int = 10
MIN_MAIL_TIMEOUT_SECONDS: int = 1
MAX_MAIL_TIMEOUT_SECONDS: int = 60

# =============================================================================
# Management API
# =============================================================================

DEFAULT_API_HOST: str = "127.0.0.1"
DEFAULT_API_PORT: int = 8402

# =============================================================================
# Versioning
# =============================================================================

INITIAL_VERSION: str = "v1"
