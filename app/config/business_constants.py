"""
Business logic constants for the MAGNA token sale.

Central location for business rules and defaults used across the application.
All amounts are integers scaled by 10**18; all rates are basis points.
"""

from typing import NamedTuple

from calculator.constants import (
    BPS_DENOMINATOR,
    DEFAULT_LADDER_BPS,
    DEFAULT_LIQUIDITY_FEE_BPS,
    DEFAULT_PRICING_FEE_BPS,
    DEFAULT_USER_SHARE_BPS,
    PRECISION,
)

DAY_SECONDS = 24 * 60 * 60


class SubscriptionTierConfig(NamedTuple):
    """Subscription tier configuration."""

    price: int  # Base units paid on subscribe
    duration_seconds: int  # Subscription lifetime
    max_cumulative_deposit: int  # Purchase cap per rolling window


# Default tier table (prices 150/550/970 base)
SUBSCRIPTION_TIERS: list[SubscriptionTierConfig] = [
    SubscriptionTierConfig(
        price=150 * PRECISION,
        duration_seconds=30 * DAY_SECONDS,
        max_cumulative_deposit=1_000 * PRECISION,
    ),
    SubscriptionTierConfig(
        price=550 * PRECISION,
        duration_seconds=30 * DAY_SECONDS,
        max_cumulative_deposit=3_000 * PRECISION,
    ),
    SubscriptionTierConfig(
        price=970 * PRECISION,
        duration_seconds=30 * DAY_SECONDS,
        max_cumulative_deposit=5_000 * PRECISION,
    ),
]

# Max raw referral depth at which an ancestor of each tier earns commission
COMMISSION_DEPTH_BY_TIER: list[int] = [1, 2, 3]

# Buy path
PRICING_FEE_BPS = DEFAULT_PRICING_FEE_BPS
LIQUIDITY_FEE_BPS = DEFAULT_LIQUIDITY_FEE_BPS
MAX_AMOUNT_PER_BUY = 100 * PRECISION
MAX_PURCHASE = 5_000 * PRECISION
PURCHASE_COOLDOWN_SECONDS = DAY_SECONDS

# Sell path
USER_SHARE_BPS = DEFAULT_USER_SHARE_BPS
COMMISSION_LADDER_BPS = DEFAULT_LADDER_BPS
SUCCESS_REWARD_BPS = 0
SUCCESS_REWARD_REQUIREMENT = 0
AUTO_WITHDRAW_DELAY_SECONDS = 30 * DAY_SECONDS

# Subscription payment split (guarantee / treasury / denominator)
SUBSCRIPTION_GUARANTEE_SHARE = 500
SUBSCRIPTION_TREASURY_SHARE = 500
SUBSCRIPTION_SHARE_DENOMINATOR = 1_000

# Asset ledger transfer fee (reference token: 0.7% + 1.8%)
ASSET_GUARANTEE_FEE = 7
ASSET_TREASURY_FEE = 18
ASSET_FEE_DENOMINATOR = 1_000

# Walk bound for referral chains
MAX_REFERRAL_DEPTH = 64


def validate_shares(first: int, second: int, denominator: int) -> None:
    """
    Check a two-way share triple.

    Raises:
        ValueError: If shares are negative or exceed the denominator
    """
    if denominator <= 0:
        raise ValueError("Denominator must be positive")
    if first < 0 or second < 0:
        raise ValueError("Shares must be non-negative")
    if first + second > denominator:
        raise ValueError(
            f"Shares {first}+{second} exceed denominator {denominator}"
        )


def validate_profit_distribution(ladder_bps: list[int], user_share_bps: int) -> None:
    """
    Check that commissions fit inside the protocol's cut of profit.

    The ladder is applied to the account's profit share, so its total
    must not exceed what remains after the account is paid.

    Raises:
        ValueError: On out-of-range rates
    """
    if not 0 <= user_share_bps <= BPS_DENOMINATOR:
        raise ValueError("User share must be within 0..100%")
    if any(rate < 0 for rate in ladder_bps):
        raise ValueError("Ladder rates must be non-negative")
    total = sum(ladder_bps)
    if total > BPS_DENOMINATOR:
        raise ValueError(f"Ladder total {total} exceeds {BPS_DENOMINATOR}")
    if total * user_share_bps > (BPS_DENOMINATOR - user_share_bps) * BPS_DENOMINATOR:
        raise ValueError("Ladder exceeds the protocol share of profit")
