"""
Deposit entry model.

Append-only purchase history; one row per buy chunk.
"""

from sqlalchemy import BigInteger, Boolean, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import AddressType, Amount


class DepositEntry(Base):
    """Deposit history entry."""

    __tablename__ = "deposit_entries"
    __table_args__ = (
        Index("idx_deposit_entries_address_timestamp", "address", "timestamp"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    address: Mapped[str] = mapped_column(AddressType, nullable=False, index=True)
    amount_base: Mapped[int] = mapped_column(Amount, nullable=False)
    # Share of the gross amount the caller was charged; counts towards the purchase window
    window_amount: Mapped[int] = mapped_column(Amount, nullable=False)
    base_credited: Mapped[int] = mapped_column(Amount, nullable=False)
    token_amount: Mapped[int] = mapped_column(Amount, nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Closed once the position it belongs to is fully sold
    is_closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reinvested: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
