"""
MAGNA bonding-curve calculator.

Standalone package for fixed-point curve pricing and profit sharing.

Example:
    >>> from calculator import CurveCalculator, to_units
    >>>
    >>> calc = CurveCalculator()
    >>> first = calc.simulate_buy(to_units(100), 0, 0, to_units(100))
    >>> (first.reserve_token_after, first.reserve_base_after)
    (97500000000000000000, 99500000000000000000)
"""

from calculator.constants import (
    BPS_DENOMINATOR,
    DECIMALS,
    DEFAULT_LADDER_BPS,
    DEFAULT_LIQUIDITY_FEE_BPS,
    DEFAULT_PRICING_FEE_BPS,
    DEFAULT_USER_SHARE_BPS,
    PRECISION,
    to_units,
)
from calculator.core.calculator import (
    CurveCalculator,
    apply_bps,
    ladder_amounts,
    mul_div,
    quote_tokens_out,
    split_chunks,
    spot_price,
    value_of,
)
from calculator.core.models import BuyQuote, ChunkFill, ProfitSplit
from calculator.utils import format_amount, format_bps, to_decimal


__version__ = "1.0.0"
__all__ = [
    # Core
    "CurveCalculator",
    "apply_bps",
    "ladder_amounts",
    "mul_div",
    "quote_tokens_out",
    "split_chunks",
    "spot_price",
    "value_of",
    # Models
    "BuyQuote",
    "ChunkFill",
    "ProfitSplit",
    # Constants
    "BPS_DENOMINATOR",
    "DECIMALS",
    "PRECISION",
    "DEFAULT_LADDER_BPS",
    "DEFAULT_LIQUIDITY_FEE_BPS",
    "DEFAULT_PRICING_FEE_BPS",
    "DEFAULT_USER_SHARE_BPS",
    "to_units",
    # Formatters
    "format_amount",
    "format_bps",
    "to_decimal",
]
