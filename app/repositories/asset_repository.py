"""
Asset ledger repository.

Data access layer for balances, allowances, whitelist and contracts.
"""

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.asset_ledger import (
    AssetAllowance,
    AssetBalance,
    AssetContract,
    AssetWhitelist,
)
from app.repositories.base import BaseRepository


class AssetBalanceRepository(BaseRepository[AssetBalance]):
    """Balance rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AssetBalance, session)

    async def balance_of(self, address: str) -> int:
        """Balance of address (0 if never funded)."""
        row = await self.get_by(address=address)
        return row.balance if row else 0

    async def get_or_create(self, address: str) -> AssetBalance:
        """Balance row of address, created empty if missing."""
        row = await self.get_by(address=address)
        if row is None:
            row = await self.create(address=address, balance=0)
        return row


class AssetAllowanceRepository(BaseRepository[AssetAllowance]):
    """Allowance rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AssetAllowance, session)

    async def allowance(self, owner: str, spender: str) -> int:
        """Allowance granted by owner to spender."""
        row = await self.get_by(owner=owner, spender=spender)
        return row.amount if row else 0

    async def set_allowance(self, owner: str, spender: str, amount: int) -> AssetAllowance:
        """Overwrite allowance."""
        row = await self.get_by(owner=owner, spender=spender)
        if row is None:
            return await self.create(owner=owner, spender=spender, amount=amount)
        row.amount = amount
        await self.session.flush()
        return row


class AssetRegistryRepository:
    """Whitelist and contract registry."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.whitelist = BaseRepository(AssetWhitelist, session)
        self.contracts = BaseRepository(AssetContract, session)

    async def is_whitelisted(self, address: str) -> bool:
        return await self.whitelist.exists(address=address)

    async def add_whitelist(self, address: str) -> None:
        await self.whitelist.create(address=address)

    async def remove_whitelist(self, address: str) -> None:
        await self.session.execute(
            delete(AssetWhitelist).where(AssetWhitelist.address == address)
        )

    async def is_contract(self, address: str) -> bool:
        return await self.contracts.exists(address=address)

    async def register_contract(self, address: str) -> None:
        if not await self.is_contract(address):
            await self.contracts.create(address=address)
