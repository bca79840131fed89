"""
Asset ledger models.

Balances, allowances, whitelist and contract registry of the
fee-on-transfer base asset.
"""

from sqlalchemy import Boolean, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin
from app.models.types import AddressType, Amount


class AssetBalance(TimestampMixin, Base):
    """Balance of an address."""

    __tablename__ = "asset_balances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    address: Mapped[str] = mapped_column(
        AddressType, unique=True, index=True, nullable=False
    )
    balance: Mapped[int] = mapped_column(Amount, nullable=False, default=0)


class AssetAllowance(TimestampMixin, Base):
    """Amount a spender may pull from an owner."""

    __tablename__ = "asset_allowances"
    __table_args__ = (
        UniqueConstraint("owner", "spender", name="uq_asset_allowances_owner_spender"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(AddressType, nullable=False, index=True)
    spender: Mapped[str] = mapped_column(AddressType, nullable=False)
    amount: Mapped[int] = mapped_column(Amount, nullable=False, default=0)


class AssetWhitelist(Base):
    """Whitelisted address (may receive as a contract, fee-exempt)."""

    __tablename__ = "asset_whitelist"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    address: Mapped[str] = mapped_column(
        AddressType, unique=True, index=True, nullable=False
    )


class AssetContract(Base):
    """Address known to be a contract."""

    __tablename__ = "asset_contracts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    address: Mapped[str] = mapped_column(
        AddressType, unique=True, index=True, nullable=False
    )


class AssetLedgerConfig(TimestampMixin, Base):
    """Transfer fee split configuration."""

    __tablename__ = "asset_ledger_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    owner: Mapped[str] = mapped_column(AddressType, nullable=False)
    guarantee_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    treasury_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    fee_denominator: Mapped[int] = mapped_column(Integer, nullable=False)
    guarantee_addr: Mapped[str] = mapped_column(AddressType, nullable=False)
    treasury_addr: Mapped[str] = mapped_column(AddressType, nullable=False)
    whitelist_fee_exempt: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
