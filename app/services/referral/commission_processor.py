"""
Referral commission processor.

Walks the seller's referral chain and assigns the commission ladder to the
first eligible ancestors. Ineligible ancestors are skipped without using a
ladder slot, so the rate depends on eligibility rank, not raw depth.
"""

from collections import defaultdict
from dataclasses import dataclass, field

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from calculator import format_amount, ladder_amounts
from app.models.account import Account
from app.models.commission_earning import EarningKind
from app.repositories.account_repository import AccountRepository
from app.repositories.earning_repository import CommissionEarningRepository
from app.services.referral.chain_manager import ReferralChainManager
from app.services.referral.config import REFERRAL_DEPTH, max_depth_for_tier


@dataclass
class CommissionPayout:
    """Single ladder slot filled by an ancestor."""

    recipient: str
    depth: int
    rank: int
    rate_bps: int
    amount: int


@dataclass
class CommissionResult:
    """Result of commission distribution."""

    payouts: list[CommissionPayout] = field(default_factory=list)
    totals: dict[str, int] = field(default_factory=dict)
    distributed: int = 0
    remainder: int = 0


class ReferralCommissionProcessor:
    """Computes and records ladder commissions for a sell."""

    def __init__(self, session: AsyncSession, max_depth: int = REFERRAL_DEPTH) -> None:
        """
        Initialize commission processor.

        Args:
            session: Async database session
            max_depth: Bound on the upward walk
        """
        self.session = session
        self.chain = ReferralChainManager(session, max_depth)
        self.account_repo = AccountRepository(session)
        self.earning_repo = CommissionEarningRepository(session)

    async def distribute(
        self,
        source: str,
        user_profit: int,
        protocol_cut: int,
        ladder_bps: list[int],
        depth_by_tier: list[int],
        now: int,
    ) -> CommissionResult:
        """
        Assign ladder commissions for a realized profit.

        Args:
            source: Selling account
            user_profit: Account's share of profit (ladder base)
            protocol_cut: Profit left after the account's share
            ladder_bps: Rates by eligibility rank
            depth_by_tier: Deepest eligible raw depth per tier
            now: Protocol time for subscription validity

        Returns:
            CommissionResult; remainder = protocol_cut - distributed
        """
        amounts = ladder_amounts(user_profit, ladder_bps)
        result = CommissionResult()
        totals: dict[str, int] = defaultdict(int)

        if user_profit > 0 and any(amounts):
            rank = 0
            chain = await self.chain.get_recruitors(source)
            for depth, ancestor in enumerate(chain, start=1):
                if rank >= len(amounts):
                    break
                account = await self.account_repo.get_by_address(ancestor)
                if not self.is_eligible(account, depth, depth_by_tier, now):
                    continue
                payout = CommissionPayout(
                    recipient=ancestor,
                    depth=depth,
                    rank=rank + 1,
                    rate_bps=ladder_bps[rank],
                    amount=amounts[rank],
                )
                result.payouts.append(payout)
                totals[ancestor] += payout.amount
                rank += 1

        result.totals = {k: v for k, v in totals.items() if v > 0}
        result.distributed = sum(result.totals.values())
        result.remainder = max(protocol_cut - result.distributed, 0)

        logger.debug(
            "Commissions computed",
            extra={
                "source": source,
                "user_profit": format_amount(user_profit),
                "slots_filled": len(result.payouts),
                "distributed": format_amount(result.distributed),
                "remainder": format_amount(result.remainder),
            },
        )
        return result

    @staticmethod
    def is_eligible(
        account: Account | None, depth: int, depth_by_tier: list[int], now: int
    ) -> bool:
        """Ancestor earns at this depth if subscribed and its tier reaches it."""
        if account is None or not account.is_valid_at(now):
            return False
        return depth <= max_depth_for_tier(account.subscription_level, depth_by_tier)

    async def record(
        self, source: str, result: CommissionResult, now: int
    ) -> None:
        """Persist one earning row per filled ladder slot."""
        for payout in result.payouts:
            if payout.amount <= 0:
                continue
            await self.earning_repo.create(
                recipient=payout.recipient,
                source=source,
                kind=EarningKind.COMMISSION,
                depth=payout.depth,
                rank=payout.rank,
                amount=payout.amount,
                timestamp=now,
            )
            logger.info(
                "Referral commission paid",
                extra={
                    "recipient": payout.recipient,
                    "source": source,
                    "depth": payout.depth,
                    "rank": payout.rank,
                    "rate_bps": payout.rate_bps,
                    "amount": format_amount(payout.amount),
                },
            )
