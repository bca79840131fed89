"""
Used nonce model.

Consumed subscription-code nonces; a nonce is single-use globally.
"""

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import AddressType, Amount


class UsedNonce(Base):
    """Consumed subscription-code nonce."""

    __tablename__ = "used_nonces"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nonce: Mapped[int] = mapped_column(Amount, unique=True, nullable=False)
    account: Mapped[str] = mapped_column(AddressType, nullable=False)
    used_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
