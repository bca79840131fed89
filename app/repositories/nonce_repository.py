"""
Nonce repository.

Data access layer for consumed subscription-code nonces.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.used_nonce import UsedNonce
from app.repositories.base import BaseRepository


class NonceRepository(BaseRepository[UsedNonce]):
    """Consumed nonce registry."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize nonce repository."""
        super().__init__(UsedNonce, session)

    async def is_used(self, nonce: int) -> bool:
        """Check if nonce was consumed by any account."""
        return await self.exists(nonce=nonce)

    async def mark_used(self, nonce: int, account: str, now: int) -> UsedNonce:
        """Consume nonce."""
        return await self.create(nonce=nonce, account=account, used_at=now)
