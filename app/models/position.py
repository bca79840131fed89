"""
Position model.

Token balance and cost basis an account currently holds in the trading engine.
"""

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin
from app.models.types import AddressType, Amount


class Position(TimestampMixin, Base):
    """Open position - tokens held and base paid for them."""

    __tablename__ = "positions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    address: Mapped[str] = mapped_column(
        AddressType, unique=True, index=True, nullable=False
    )
    token_balance: Mapped[int] = mapped_column(Amount, nullable=False, default=0)
    cost_basis: Mapped[int] = mapped_column(Amount, nullable=False, default=0)

    # Timestamp of the first buy of the current position (maturity start)
    opened_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    @property
    def is_open(self) -> bool:
        return self.token_balance > 0
