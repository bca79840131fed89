"""
Trading result types.
"""

from dataclasses import dataclass, field


@dataclass
class BuyResult:
    """Result of a (possibly chunked) buy."""

    account: str
    amount: int
    tokens_out: int
    base_credited: int
    withheld: int
    chunks: int
    reinvested: bool = False


@dataclass
class SellResult:
    """Result of a sell or auto-withdraw settlement."""

    account: str
    token_amount: int
    current_value: int
    cost_basis: int
    profit: int
    payout: int
    commissions: dict[str, int] = field(default_factory=dict)
    success_reward: int = 0
    protocol_share: int = 0
    reinvestment: BuyResult | None = None
