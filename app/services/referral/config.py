"""
Referral system configuration.

Contains constants and configuration for the referral system.
"""

from app.config.business_constants import (
    COMMISSION_LADDER_BPS,
    MAX_REFERRAL_DEPTH,
)

# Upper bound on any upward walk; a longer chain is treated as a cycle guard hit
REFERRAL_DEPTH = MAX_REFERRAL_DEPTH

# Commission ladder by eligibility rank (bps of the account's profit share):
# 6% for the first eligible ancestor, 3% for the second, 2% for the third
REFERRAL_RATES = {
    rank: rate for rank, rate in enumerate(COMMISSION_LADDER_BPS, start=1)
}


def max_depth_for_tier(tier: int, depth_by_tier: list[int]) -> int:
    """
    Deepest eligible raw depth for a tier.

    Tiers beyond the configured list use the last entry; an empty
    policy makes nobody eligible.
    """
    if not depth_by_tier or tier < 0:
        return 0
    return depth_by_tier[min(tier, len(depth_by_tier) - 1)]
