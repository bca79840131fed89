"""
Pool state model.

Single-row reserve pair of the liquidity pool.
"""

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin
from app.models.types import AddressType, Amount


class PoolState(TimestampMixin, Base):
    """Reserve pair and the single authorized trader."""

    __tablename__ = "pool_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    reserve_token: Mapped[int] = mapped_column(Amount, nullable=False, default=0)
    reserve_base: Mapped[int] = mapped_column(Amount, nullable=False, default=0)
    trader: Mapped[str] = mapped_column(AddressType, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<PoolState(reserve_token={self.reserve_token}, "
            f"reserve_base={self.reserve_base}, trader={self.trader!r})>"
        )
