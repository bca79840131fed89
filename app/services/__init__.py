"""
Services.

Business logic layer.
"""

# Base Service Infrastructure
from app.services.base_service import BaseService, atomic

# Asset Ledger
from app.services.asset_ledger_service import AssetLedgerService

# Liquidity Pool
from app.services.pool import LiquidityPoolService

# Referral & Subscription Ledger
from app.services.referral import (
    EthSignatureVerifier,
    ReferralCommissionProcessor,
    SubscriptionService,
)

# Trading Engine
from app.services.trading import BuyResult, SellResult, TradingService

# Protocol Facade
from app.services.protocol import TokenSaleProtocol


__all__ = [
    # Base Infrastructure
    "BaseService",
    "atomic",
    # Core
    "AssetLedgerService",
    "LiquidityPoolService",
    "SubscriptionService",
    "ReferralCommissionProcessor",
    "EthSignatureVerifier",
    "TradingService",
    "BuyResult",
    "SellResult",
    # Facade
    "TokenSaleProtocol",
]
