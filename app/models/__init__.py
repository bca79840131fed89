"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from app.models.account import Account
from app.models.asset_ledger import (
    AssetAllowance,
    AssetBalance,
    AssetContract,
    AssetLedgerConfig,
    AssetWhitelist,
)
from app.models.base import Base
from app.models.commission_earning import CommissionEarning, EarningKind
from app.models.deposit_entry import DepositEntry
from app.models.ledger_config import LedgerConfig
from app.models.pool_state import PoolState
from app.models.position import Position
from app.models.subscription_tier import SubscriptionTier
from app.models.trading_config import TradingConfig
from app.models.used_nonce import UsedNonce

__all__ = [
    # Base
    "Base",
    # Referral ledger
    "Account",
    "SubscriptionTier",
    "UsedNonce",
    "LedgerConfig",
    # Liquidity pool
    "PoolState",
    # Trading engine
    "TradingConfig",
    "Position",
    "DepositEntry",
    "CommissionEarning",
    "EarningKind",
    # Asset ledger
    "AssetBalance",
    "AssetAllowance",
    "AssetWhitelist",
    "AssetContract",
    "AssetLedgerConfig",
]
