"""Pydantic models for calculator."""

from pydantic import BaseModel, ConfigDict, Field


class ChunkFill(BaseModel):
    """Single chunk of a chunked buy, priced against the reserves at that moment."""

    model_config = ConfigDict(frozen=True)

    amount: int = Field(..., gt=0, description="Chunk size in base units")
    net_for_pricing: int = Field(..., ge=0, description="Chunk after pricing fee")
    tokens_out: int = Field(..., ge=0, description="Tokens minted for the chunk")
    base_credited: int = Field(..., ge=0, description="Base credited to the pool")


class BuyQuote(BaseModel):
    """Result of simulating a chunked buy against a reserve pair."""

    model_config = ConfigDict(frozen=True)

    fills: list[ChunkFill] = Field(default_factory=list)
    tokens_out: int = Field(..., ge=0, description="Total tokens minted")
    base_credited: int = Field(..., ge=0, description="Total base credited to the pool")
    withheld: int = Field(..., ge=0, description="Base withheld as protocol fee")
    reserve_token_after: int = Field(..., ge=0)
    reserve_base_after: int = Field(..., ge=0)


class ProfitSplit(BaseModel):
    """Split of a sell's current value between account and protocol.

    Profit is clamped at zero: on a loss the account receives the full
    current value and nothing is distributed.
    """

    model_config = ConfigDict(frozen=True)

    current_value: int = Field(..., ge=0)
    cost_basis: int = Field(..., ge=0)
    profit: int = Field(..., ge=0)
    user_profit: int = Field(..., ge=0, description="Account's share of profit")
    protocol_cut: int = Field(..., ge=0, description="Profit left for commissions and protocol")
    payout: int = Field(..., ge=0, description="Amount due to the account")
