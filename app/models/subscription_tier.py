"""
Subscription tier model.

Mutable tier table addressed by tier index.
"""

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin
from app.models.types import Amount


class SubscriptionTier(TimestampMixin, Base):
    """Subscription tier - price, duration and purchase cap."""

    __tablename__ = "subscription_tiers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    tier_index: Mapped[int] = mapped_column(
        Integer, unique=True, index=True, nullable=False
    )
    price: Mapped[int] = mapped_column(Amount, nullable=False)
    duration_seconds: Mapped[int] = mapped_column(BigInteger, nullable=False)
    max_cumulative_deposit: Mapped[int] = mapped_column(Amount, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<SubscriptionTier(index={self.tier_index}, price={self.price}, "
            f"duration={self.duration_seconds})>"
        )
