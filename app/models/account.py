"""
Account model.

Subscription and referral record of an account in the referral ledger.
"""

from sqlalchemy import BigInteger, CheckConstraint, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin
from app.models.types import AddressType


class Account(TimestampMixin, Base):
    """Account model - subscribers of the referral ledger."""

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint(
            "subscription_level >= 0", name="subscription_level_non_negative"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    address: Mapped[str] = mapped_column(
        AddressType, unique=True, index=True, nullable=False
    )

    # Upline that sponsored this account; children are found by this index
    referral: Mapped[str | None] = mapped_column(
        AddressType, nullable=True, index=True
    )

    subscription_level: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    registered_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0
    )
    subscription_expires_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0
    )

    def is_valid_at(self, now: int) -> bool:
        """Subscription is valid strictly before expiry."""
        return now < self.subscription_expires_at

    def __repr__(self) -> str:
        return (
            f"<Account(address={self.address!r}, level={self.subscription_level}, "
            f"referral={self.referral!r}, expires_at={self.subscription_expires_at})>"
        )
