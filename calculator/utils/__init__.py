"""
Utility functions for calculator.

Formatting helpers for scaled integer amounts.
"""

from calculator.utils.formatters import format_amount, format_bps, to_decimal

__all__ = [
    "format_amount",
    "format_bps",
    "to_decimal",
]
