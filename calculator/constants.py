"""
Default constants for the bonding-curve calculator.

All monetary values are integers scaled by 10**18 (wei-style units).
All rates are basis points over BPS_DENOMINATOR.
"""

# Base asset and token share the same precision
DECIMALS = 18
PRECISION = 10**DECIMALS

# Rates denominator (basis points)
BPS_DENOMINATOR = 10_000

# Buy fees
DEFAULT_PRICING_FEE_BPS = 250  # tokens priced on 97.5% of the chunk
DEFAULT_LIQUIDITY_FEE_BPS = 50  # pool credited with 99.5% of the chunk

# Profit sharing
DEFAULT_USER_SHARE_BPS = 6_500  # account keeps 65% of realized profit
DEFAULT_LADDER_BPS: list[int] = [600, 300, 200]  # of the account's profit share


def to_units(amount: int | str) -> int:
    """
    Convert a whole/decimal token amount to scaled units.

    Example:
        >>> to_units(100)
        100000000000000000000
        >>> to_units("97.5")
        97500000000000000000
    """
    text = str(amount)
    if "." not in text:
        return int(text) * PRECISION
    whole, frac = text.split(".", 1)
    if len(frac) > DECIMALS:
        raise ValueError(f"Too many fractional digits: {amount}")
    return int(whole or "0") * PRECISION + int(frac.ljust(DECIMALS, "0"))
