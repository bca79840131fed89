"""
Unit tests for commission eligibility and ladder assignment.

The chain walk and account lookups are mocked; only the ranking logic
is under test.
"""

from unittest.mock import AsyncMock

import pytest

from app.services.referral.commission_processor import ReferralCommissionProcessor
from app.services.referral.config import REFERRAL_RATES, max_depth_for_tier
from calculator import PRECISION

NOW = 1_700_000_000
LADDER = [600, 300, 200]
DEPTHS = [1, 2, 3]


class TestTierDepthPolicy:
    """Tests for the tier to depth mapping."""

    @pytest.mark.parametrize("tier,expected", [(0, 1), (1, 2), (2, 3), (7, 3)])
    def test_default_policy(self, tier, expected):
        assert max_depth_for_tier(tier, DEPTHS) == expected

    def test_empty_policy(self):
        assert max_depth_for_tier(2, []) == 0

    def test_rates_by_rank(self):
        assert REFERRAL_RATES == {1: 600, 2: 300, 3: 200}


class TestIsEligible:
    """Tests for ancestor eligibility."""

    def test_missing_account(self):
        assert not ReferralCommissionProcessor.is_eligible(None, 1, DEPTHS, NOW)

    def test_expired_subscription(self, make_account):
        account = make_account(tier=2, expires_in=0)
        assert not ReferralCommissionProcessor.is_eligible(account, 1, DEPTHS, NOW)

    def test_depth_within_tier(self, make_account):
        assert ReferralCommissionProcessor.is_eligible(make_account(tier=0), 1, DEPTHS, NOW)
        assert ReferralCommissionProcessor.is_eligible(make_account(tier=2), 3, DEPTHS, NOW)

    def test_depth_beyond_tier(self, make_account):
        assert not ReferralCommissionProcessor.is_eligible(make_account(tier=0), 2, DEPTHS, NOW)
        assert not ReferralCommissionProcessor.is_eligible(make_account(tier=1), 3, DEPTHS, NOW)


class TestDistribute:
    """Tests for ladder distribution over a mocked chain."""

    @pytest.fixture
    def processor(self, mock_session, make_account):
        """Processor over chain p1 (tier 0) -> p2 (tier 0) -> p3 (tier 2) -> root."""
        processor = ReferralCommissionProcessor(mock_session)
        processor.chain.get_recruitors = AsyncMock(return_value=["p1", "p2", "p3", "root"])
        accounts = {
            "p1": make_account(tier=0),
            "p2": make_account(tier=0),
            "p3": make_account(tier=2),
            "root": None,
        }
        processor.account_repo.get_by_address = AsyncMock(side_effect=accounts.get)
        return processor

    @pytest.mark.asyncio
    async def test_skipped_ancestor_keeps_slot(self, processor):
        """An ineligible ancestor does not use a ladder rank."""
        user_profit = 10 * PRECISION

        result = await processor.distribute("seller", user_profit, 5 * PRECISION, LADDER, DEPTHS, NOW)

        assert [(p.recipient, p.depth, p.rank) for p in result.payouts] == [
            ("p1", 1, 1),
            ("p3", 3, 2),
        ]
        assert result.totals == {
            "p1": 6 * PRECISION // 10,
            "p3": 3 * PRECISION // 10,
        }
        assert result.distributed == 9 * PRECISION // 10
        assert result.remainder == 5 * PRECISION - result.distributed

    @pytest.mark.asyncio
    async def test_zero_profit_skips_walk(self, processor):
        """Nothing is distributed and the chain is not walked."""
        result = await processor.distribute("seller", 0, 0, LADDER, DEPTHS, NOW)

        assert result.payouts == []
        assert result.remainder == 0
        processor.chain.get_recruitors.assert_not_called()

    @pytest.mark.asyncio
    async def test_wider_policy_fills_all_ranks(self, processor):
        """With every depth allowed, the first three ancestors take all ranks."""
        result = await processor.distribute(
            "seller", 10 * PRECISION, 5 * PRECISION, LADDER, [3, 3, 3], NOW
        )

        assert [p.recipient for p in result.payouts] == ["p1", "p2", "p3"]
        assert [p.rate_bps for p in result.payouts] == LADDER
