"""
Commission earning repository.

Data access layer for CommissionEarning model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.commission_earning import CommissionEarning
from app.repositories.base import BaseRepository


class CommissionEarningRepository(BaseRepository[CommissionEarning]):
    """Commission earning queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize earning repository."""
        super().__init__(CommissionEarning, session)

    async def total_for(self, recipient: str, kind: str | None = None) -> int:
        """
        Total earned by recipient.

        Amounts are stored as text, so the sum is taken in Python.
        """
        stmt = select(CommissionEarning.amount).where(
            CommissionEarning.recipient == recipient
        )
        if kind:
            stmt = stmt.where(CommissionEarning.kind == kind)
        result = await self.session.execute(stmt)
        return sum(result.scalars().all())
