"""
Commission earning model.

Record of a commission or success reward paid out on a sell.
"""

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import AddressType, Amount


class EarningKind:
    """Earning kinds."""

    COMMISSION = "commission"
    SUCCESS_REWARD = "success_reward"


class CommissionEarning(Base):
    """Commission earning record."""

    __tablename__ = "commission_earnings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    recipient: Mapped[str] = mapped_column(AddressType, nullable=False, index=True)
    source: Mapped[str] = mapped_column(AddressType, nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    depth: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rank: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    amount: Mapped[int] = mapped_column(Amount, nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
