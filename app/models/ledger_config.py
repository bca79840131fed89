"""
Ledger config model.

Single-row configuration of the referral ledger.
"""

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class LedgerConfig(TimestampMixin, Base):
    """Subscription payment split and code-subscription tier."""

    __tablename__ = "ledger_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    guarantee_share: Mapped[int] = mapped_column(Integer, nullable=False)
    treasury_share: Mapped[int] = mapped_column(Integer, nullable=False)
    share_denominator: Mapped[int] = mapped_column(Integer, nullable=False)
    code_tier: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
