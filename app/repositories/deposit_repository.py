"""
Deposit repository.

Data access layer for DepositEntry and Position models.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.deposit_entry import DepositEntry
from app.models.position import Position
from app.repositories.base import BaseRepository


class DepositRepository(BaseRepository[DepositEntry]):
    """Deposit history queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize deposit repository."""
        super().__init__(DepositEntry, session)

    async def count_open(self, address: str) -> int:
        """Number of entries in the current position."""
        return await self.count(address=address, is_closed=False)

    async def get_window_amounts(self, address: str, since: int) -> list[int]:
        """
        Gross window amounts of all entries strictly newer than `since`.

        Closed entries still count towards the purchase window.
        """
        stmt = select(DepositEntry.window_amount).where(
            DepositEntry.address == address,
            DepositEntry.timestamp > since,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def close_entries(self, address: str) -> int:
        """
        Mark the current position's entries as closed.

        Returns:
            Number of entries closed
        """
        stmt = (
            update(DepositEntry)
            .where(DepositEntry.address == address, DepositEntry.is_closed.is_(False))
            .values(is_closed=True)
        )
        result = await self.session.execute(stmt)
        return result.rowcount


class PositionRepository(BaseRepository[Position]):
    """Position queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize position repository."""
        super().__init__(Position, session)

    async def get_by_address(self, address: str) -> Position | None:
        """Position of address or None."""
        return await self.get_by(address=address)

    async def get_or_create(self, address: str) -> Position:
        """Position of address, created empty if missing."""
        position = await self.get_by_address(address)
        if position is None:
            position = await self.create(
                address=address, token_balance=0, cost_basis=0, opened_at=None
            )
        return position

    async def find_matured(self, opened_before: int) -> list[str]:
        """
        Addresses of open positions opened at or before a timestamp.

        Args:
            opened_before: Latest opening timestamp that counts as matured

        Returns:
            Addresses in opening order
        """
        stmt = (
            select(Position.address)
            .where(
                Position.opened_at.is_not(None),
                Position.opened_at <= opened_before,
            )
            .order_by(Position.opened_at, Position.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
