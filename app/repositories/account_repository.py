"""
Account repository.

Data access layer for Account model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.account import Account
from app.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """Account repository with referral queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize account repository."""
        super().__init__(Account, session)

    async def get_by_address(self, address: str) -> Account | None:
        """
        Get account by address.

        Args:
            address: Normalized address

        Returns:
            Account or None
        """
        return await self.get_by(address=address)

    async def get_referral_of(self, address: str) -> str | None:
        """Upline of address, or None for roots and unknown accounts."""
        stmt = select(Account.referral).where(Account.address == address)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_downlines(self, referral: str) -> list[str]:
        """
        Direct downlines of an account.

        Args:
            referral: Upline address

        Returns:
            Downline addresses in registration order
        """
        stmt = (
            select(Account.address)
            .where(Account.referral == referral)
            .order_by(Account.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
