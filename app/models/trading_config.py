"""
Trading config model.

Single-row configuration and pending balance of the trading engine.
"""

from sqlalchemy import JSON, BigInteger, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin
from app.models.types import AddressType, Amount


class TradingConfig(TimestampMixin, Base):
    """Fees, limits, profit distribution and accumulated protocol rewards."""

    __tablename__ = "trading_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Buy path
    pricing_fee_bps: Mapped[int] = mapped_column(Integer, nullable=False)
    liquidity_fee_bps: Mapped[int] = mapped_column(Integer, nullable=False)
    max_amount_per_buy: Mapped[int] = mapped_column(Amount, nullable=False)
    max_purchase: Mapped[int] = mapped_column(Amount, nullable=False)
    purchase_cooldown: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Sell path
    user_share_bps: Mapped[int] = mapped_column(Integer, nullable=False)
    commission_ladder_bps: Mapped[list[int]] = mapped_column(JSON, nullable=False)
    commission_depth_by_tier: Mapped[list[int]] = mapped_column(JSON, nullable=False)
    success_reward_bps: Mapped[int] = mapped_column(Integer, nullable=False)
    success_reward_requirement: Mapped[int] = mapped_column(Amount, nullable=False)
    auto_withdraw_delay: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Protocol rewards
    fee_to: Mapped[str] = mapped_column(AddressType, nullable=False)
    pending_balance: Mapped[int] = mapped_column(Amount, nullable=False, default=0)
