"""
Pure fixed-point calculator for bonding-curve pricing and profit sharing.

This module contains standalone calculation logic without any
dependencies on database, ORM, or app-specific code. Every division is
integer floor division (round down), so results are replayable bit-for-bit.
"""

from calculator.constants import (
    BPS_DENOMINATOR,
    DEFAULT_LIQUIDITY_FEE_BPS,
    DEFAULT_PRICING_FEE_BPS,
    PRECISION,
)
from calculator.core.models import BuyQuote, ChunkFill, ProfitSplit


def mul_div(a: int, b: int, denominator: int) -> int:
    """
    Compute a * b / denominator rounded down.

    Raises:
        ZeroDivisionError: If denominator is zero
    """
    if denominator == 0:
        raise ZeroDivisionError("mul_div by zero")
    return a * b // denominator


def apply_bps(amount: int, bps: int) -> int:
    """Portion of amount given in basis points, rounded down."""
    return mul_div(amount, bps, BPS_DENOMINATOR)


def split_chunks(total: int, max_per_chunk: int) -> list[int]:
    """
    Split total into chunks no larger than max_per_chunk.

    Example:
        >>> split_chunks(250, 100)
        [100, 100, 50]
    """
    if total <= 0:
        return []
    if max_per_chunk <= 0:
        raise ValueError("max_per_chunk must be positive")
    full, rest = divmod(total, max_per_chunk)
    chunks = [max_per_chunk] * full
    if rest:
        chunks.append(rest)
    return chunks


def quote_tokens_out(
    net_for_pricing: int, reserve_token: int, reserve_base: int
) -> int:
    """
    Tokens minted for net_for_pricing base at the current reserves.

    Equivalent to net / (reserve_base / reserve_token) without the
    intermediate price truncation. An empty pool prices 1:1.
    """
    if reserve_token == 0 or reserve_base == 0:
        return net_for_pricing
    return mul_div(net_for_pricing, reserve_token, reserve_base)


def spot_price(reserve_token: int, reserve_base: int) -> int:
    """Base per token scaled by PRECISION; reserve_token must be non-zero."""
    return mul_div(reserve_base, PRECISION, reserve_token)


def value_of(tokens: int, reserve_token: int, reserve_base: int) -> int:
    """Base value of tokens at the current reserves."""
    if reserve_token == 0:
        return 0
    return mul_div(tokens, reserve_base, reserve_token)


def ladder_amounts(user_profit: int, ladder_bps: list[int]) -> list[int]:
    """
    Commission amount for each ladder rank.

    Example:
        >>> ladder_amounts(10_000, [600, 300, 200])
        [600, 300, 200]
    """
    return [apply_bps(user_profit, rate) for rate in ladder_bps]


class CurveCalculator:
    """
    Pure business logic for chunked buys and sell settlement.

    Works with plain integers; the pool and trading services feed it
    the current reserves and configuration.
    """

    def __init__(
        self,
        pricing_fee_bps: int = DEFAULT_PRICING_FEE_BPS,
        liquidity_fee_bps: int = DEFAULT_LIQUIDITY_FEE_BPS,
    ) -> None:
        self.pricing_fee_bps = pricing_fee_bps
        self.liquidity_fee_bps = liquidity_fee_bps

    def price_chunk(
        self, amount: int, reserve_token: int, reserve_base: int
    ) -> ChunkFill:
        """
        Price one chunk.

        Args:
            amount: Chunk size in base units
            reserve_token: Current token reserve
            reserve_base: Current base reserve

        Returns:
            ChunkFill with tokens minted and base credited

        Example:
            >>> calc = CurveCalculator()
            >>> calc.price_chunk(100 * 10**18, 0, 0).tokens_out
            97500000000000000000
        """
        net = apply_bps(amount, BPS_DENOMINATOR - self.pricing_fee_bps)
        credited = apply_bps(amount, BPS_DENOMINATOR - self.liquidity_fee_bps)
        return ChunkFill(
            amount=amount,
            net_for_pricing=net,
            tokens_out=quote_tokens_out(net, reserve_token, reserve_base),
            base_credited=credited,
        )

    def simulate_buy(
        self,
        total: int,
        reserve_token: int,
        reserve_base: int,
        max_per_chunk: int,
    ) -> BuyQuote:
        """
        Simulate a chunked buy, re-reading the price after every chunk.

        Args:
            total: Total base amount
            reserve_token: Token reserve before the buy
            reserve_base: Base reserve before the buy
            max_per_chunk: Largest chunk size

        Returns:
            BuyQuote with per-chunk fills and reserves after the buy
        """
        fills = []
        for chunk in split_chunks(total, max_per_chunk):
            fill = self.price_chunk(chunk, reserve_token, reserve_base)
            reserve_token += fill.tokens_out
            reserve_base += fill.base_credited
            fills.append(fill)

        credited = sum(f.base_credited for f in fills)
        return BuyQuote(
            fills=fills,
            tokens_out=sum(f.tokens_out for f in fills),
            base_credited=credited,
            withheld=max(total, 0) - credited,
            reserve_token_after=reserve_token,
            reserve_base_after=reserve_base,
        )

    def split_profit(
        self, current_value: int, cost_basis: int, user_share_bps: int
    ) -> ProfitSplit:
        """
        Split a sell's value into payout and protocol cut.

        payout = cost_basis + profit * user_share; a loss pays the full
        current value and leaves nothing to distribute.
        """
        profit = max(current_value - cost_basis, 0)
        if profit == 0:
            return ProfitSplit(
                current_value=current_value,
                cost_basis=cost_basis,
                profit=0,
                user_profit=0,
                protocol_cut=0,
                payout=current_value,
            )

        user_profit = apply_bps(profit, user_share_bps)
        return ProfitSplit(
            current_value=current_value,
            cost_basis=cost_basis,
            profit=profit,
            user_profit=user_profit,
            protocol_cut=profit - user_profit,
            payout=cost_basis + user_profit,
        )
