"""
Subscription tier repository.

Data access layer for SubscriptionTier model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.subscription_tier import SubscriptionTier
from app.repositories.base import BaseRepository


class SubscriptionTierRepository(BaseRepository[SubscriptionTier]):
    """Tier table access."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize tier repository."""
        super().__init__(SubscriptionTier, session)

    async def list_tiers(self) -> list[SubscriptionTier]:
        """All tiers ordered by tier index."""
        stmt = select(SubscriptionTier).order_by(SubscriptionTier.tier_index)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_index(self, tier_index: int) -> SubscriptionTier | None:
        """Tier at index or None."""
        return await self.get_by(tier_index=tier_index)
