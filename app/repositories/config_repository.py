"""
Configuration repositories.

Single-row configuration tables of the ledger, pool, trading engine
and asset ledger.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.asset_ledger import AssetLedgerConfig
from app.models.ledger_config import LedgerConfig
from app.models.pool_state import PoolState
from app.models.trading_config import TradingConfig
from app.repositories.base import BaseRepository


class LedgerConfigRepository(BaseRepository[LedgerConfig]):
    """Referral ledger configuration."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(LedgerConfig, session)


class PoolStateRepository(BaseRepository[PoolState]):
    """Liquidity pool reserves."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(PoolState, session)


class TradingConfigRepository(BaseRepository[TradingConfig]):
    """Trading engine configuration."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(TradingConfig, session)


class AssetLedgerConfigRepository(BaseRepository[AssetLedgerConfig]):
    """Asset ledger fee configuration."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AssetLedgerConfig, session)
