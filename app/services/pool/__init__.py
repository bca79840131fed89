"""
Liquidity pool package.
"""

from app.services.pool.liquidity_pool import LiquidityPoolService

__all__ = ["LiquidityPoolService"]
