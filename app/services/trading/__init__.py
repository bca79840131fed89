"""
Trading engine package.

Contains modular services for the trading engine:
- purchase_limits: Rolling purchase window
- admin: Owner-gated configuration setters
- trading_service: Buy, sell, auto-withdraw and protocol rewards
"""

from app.services.trading.admin import TradingAdminMixin
from app.services.trading.purchase_limits import PurchaseLimitMixin
from app.services.trading.results import BuyResult, SellResult
from app.services.trading.trading_service import TradingService


__all__ = [
    "TradingService",
    "TradingAdminMixin",
    "PurchaseLimitMixin",
    "BuyResult",
    "SellResult",
]
