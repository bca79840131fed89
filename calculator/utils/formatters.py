"""
Formatting utilities for scaled integer amounts.

Renders 10**18-scaled integers as human-readable decimals for logs
and reports. Formatting never rounds: digits beyond `decimals` are cut.
"""

from decimal import Decimal

from calculator.constants import BPS_DENOMINATOR, DECIMALS, PRECISION


def to_decimal(amount: int) -> Decimal:
    """
    Convert scaled units to an exact Decimal.

    Example:
        >>> to_decimal(97500000000000000000)
        Decimal('97.5')
    """
    whole, frac = divmod(abs(amount), PRECISION)
    sign = "-" if amount < 0 else ""
    text = f"{sign}{whole}.{str(frac).rjust(DECIMALS, '0')}".rstrip("0").rstrip(".")
    return Decimal(text)


def format_amount(
    amount: int,
    symbol: str = "",
    decimals: int = DECIMALS,
    thousands_separator: str = ",",
) -> str:
    """
    Format scaled units as a decimal string.

    Args:
        amount: Scaled integer amount
        symbol: Optional unit suffix
        decimals: Maximum fractional digits shown (truncated)
        thousands_separator: Separator for the integer part

    Returns:
        Formatted amount

    Example:
        >>> format_amount(193040201005025125628)
        '193.040201005025125628'
        >>> format_amount(1500 * 10**18, symbol="USDT", decimals=2)
        '1,500 USDT'
    """
    whole, frac = divmod(abs(amount), PRECISION)
    frac_text = str(frac).rjust(DECIMALS, "0")[:decimals].rstrip("0")
    whole_text = f"{whole:,}".replace(",", thousands_separator)
    sign = "-" if amount < 0 else ""
    text = f"{sign}{whole_text}.{frac_text}" if frac_text else f"{sign}{whole_text}"
    return f"{text} {symbol}" if symbol else text


def format_bps(bps: int) -> str:
    """
    Format basis points as a percentage.

    Example:
        >>> format_bps(250)
        '2.5%'
    """
    percent = Decimal(bps) * 100 / BPS_DENOMINATOR
    return f"{percent.normalize():f}%"
