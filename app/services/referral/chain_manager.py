"""
Referral chain management module.

Handles upward chain walks and downline lookups over the referral forest.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.account_repository import AccountRepository
from app.services.referral.config import REFERRAL_DEPTH
from app.utils.exceptions import ReferralCycleError


class ReferralChainManager:
    """Manages referral chain operations."""

    def __init__(self, session: AsyncSession, max_depth: int = REFERRAL_DEPTH) -> None:
        """Initialize chain manager."""
        self.session = session
        self.max_depth = max_depth
        self.account_repo = AccountRepository(session)

    async def get_recruitors(
        self, address: str, depth: int | None = None
    ) -> list[str]:
        """
        Get the upward referral chain.

        Walks account -> referral -> referral's referral until a root
        (no referral) or the depth bound is reached.

        Args:
            address: Starting account (normalized)
            depth: Maximum hops (defaults to the configured bound)

        Returns:
            Ancestors from direct referral upwards

        Raises:
            ReferralCycleError: If the walk revisits an address
        """
        depth = self.max_depth if depth is None else depth
        chain: list[str] = []
        seen = {address}
        current = address

        for _ in range(depth):
            referral = await self.account_repo.get_referral_of(current)
            if referral is None:
                break
            if referral in seen:
                logger.error(
                    "Referral cycle detected",
                    extra={"address": address, "chain": chain, "repeat": referral},
                )
                raise ReferralCycleError(
                    f"Referral chain of {address} loops at {referral}"
                )
            chain.append(referral)
            seen.add(referral)
            current = referral

        logger.debug(
            "Referral chain retrieved",
            extra={"address": address, "depth": depth, "chain_length": len(chain)},
        )
        return chain

    async def users_by_referral(self, address: str) -> list[str]:
        """Direct downlines of address."""
        return await self.account_repo.get_downlines(address)

    async def would_create_cycle(self, address: str, referral: str) -> bool:
        """
        Check whether linking address under referral closes a loop.

        Args:
            address: Account being linked
            referral: Proposed upline

        Returns:
            True if address is referral itself or one of its ancestors
        """
        if address == referral:
            return True
        return address in await self.get_recruitors(referral)
