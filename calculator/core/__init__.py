"""
Core calculator functionality.

Fixed-point curve pricing and profit splitting.
"""

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

__all__ = [
    "CurveCalculator",
    "apply_bps",
    "ladder_amounts",
    "mul_div",
    "quote_tokens_out",
    "split_chunks",
    "spot_price",
    "value_of",
    "BuyQuote",
    "ChunkFill",
    "ProfitSplit",
]
