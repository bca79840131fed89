"""Integration tests for trading engine administration."""

import pytest

from app.config.business_constants import DAY_SECONDS
from app.utils.exceptions import ConfigurationError, NotOwnerError
from calculator import PRECISION

HUNDRED = 100 * PRECISION


class TestOwnership:
    """Setters are restricted to the owner."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "setter, args",
        [
            ("set_fee", (100, 100)),
            ("set_withdraw_profit_fee", (3_000,)),
            ("set_withdraw_profit_distribution", ([600, 300, 200],)),
            ("set_commission_depth_policy", ([1, 2, 3],)),
            ("set_success_reward", (100,)),
            ("set_success_reward_requirement", (PRECISION,)),
            ("set_purchase_cooldown", (DAY_SECONDS,)),
            ("set_max_purchase", (PRECISION,)),
            ("set_max_amount_per_buy", (PRECISION,)),
            ("set_auto_withdraw_delay", (DAY_SECONDS,)),
            ("set_fee_to", ("0x00000000000000000000000000000000000000b1",)),
        ],
    )
    async def test_non_owner_rejected(self, protocol, users, setter, args):
        with pytest.raises(NotOwnerError):
            await getattr(protocol, setter)(users.alice, *args)


class TestProfitDistribution:
    """Commission ladder must fit inside the protocol cut."""

    @pytest.mark.asyncio
    async def test_ladder_too_large(self, protocol, users):
        with pytest.raises(ConfigurationError):
            await protocol.set_withdraw_profit_distribution(users.owner, [3_000, 3_000])

    @pytest.mark.asyncio
    async def test_fee_leaving_no_room_for_ladder(self, protocol, users):
        with pytest.raises(ConfigurationError):
            await protocol.set_withdraw_profit_fee(users.owner, 0)

    @pytest.mark.asyncio
    async def test_rejected_change_keeps_config(self, protocol, member, users):
        """A rejected ladder leaves the previous ladder in force."""
        with pytest.raises(ConfigurationError):
            await protocol.set_withdraw_profit_distribution(users.owner, [3_000, 3_000])

        await member(users.bob, tier=2)
        await member(users.alice, users.bob)
        await member(users.frank)
        bought = await protocol.buy(users.alice, HUNDRED)
        await protocol.buy(users.frank, HUNDRED)
        result = await protocol.sell(users.alice, bought.tokens_out)

        user_profit = result.profit * 6_500 // 10_000
        assert result.commissions == {users.bob: user_profit * 600 // 10_000}

    @pytest.mark.asyncio
    async def test_higher_fee_lowers_payout(self, protocol, member, users):
        await protocol.set_withdraw_profit_fee(users.owner, 5_000)
        await member(users.alice)
        await member(users.frank)
        bought = await protocol.buy(users.alice, HUNDRED)
        await protocol.buy(users.frank, HUNDRED)

        result = await protocol.sell(users.alice, bought.tokens_out)

        assert result.payout == result.cost_basis + result.profit * 5_000 // 10_000

    @pytest.mark.asyncio
    async def test_out_of_range_bps(self, protocol, users):
        with pytest.raises(ConfigurationError):
            await protocol.set_success_reward(users.owner, 10_001)
        with pytest.raises(ConfigurationError):
            await protocol.set_fee(users.owner, -1, 0)


class TestLimitsConfiguration:
    """Purchase window and chunk size settings."""

    @pytest.mark.asyncio
    async def test_max_purchase_caps_limit(self, protocol, member, users):
        await member(users.alice)

        await protocol.set_max_purchase(users.owner, 300 * PRECISION)

        assert await protocol.get_purchase_limit(users.alice) == 300 * PRECISION

    @pytest.mark.asyncio
    async def test_tier_cap_edit_applies_to_existing_accounts(self, protocol, member, users):
        await member(users.alice)

        await protocol.change_subscription(
            users.owner, 0, 150 * PRECISION, 30 * DAY_SECONDS, 200 * PRECISION
        )

        assert await protocol.get_purchase_limit(users.alice) == 200 * PRECISION

    @pytest.mark.asyncio
    async def test_shorter_cooldown(self, protocol, member, users, clock):
        await protocol.set_purchase_cooldown(users.owner, 3_600)
        await member(users.alice)
        await protocol.buy(users.alice, HUNDRED)

        clock.advance(3_600)

        assert await protocol.get_purchase_limit(users.alice) == 1_000 * PRECISION

    @pytest.mark.asyncio
    async def test_zero_cooldown_rejected(self, protocol, users):
        with pytest.raises(ConfigurationError):
            await protocol.set_purchase_cooldown(users.owner, 0)

    @pytest.mark.asyncio
    async def test_chunk_size(self, protocol, member, users):
        await protocol.set_max_amount_per_buy(users.owner, 50 * PRECISION)
        await member(users.alice)

        result = await protocol.buy(users.alice, HUNDRED)

        assert result.chunks == 2
        assert await protocol.deposit_history_length(users.alice) == 2

    @pytest.mark.asyncio
    async def test_zero_chunk_size_rejected(self, protocol, users):
        with pytest.raises(ConfigurationError):
            await protocol.set_max_amount_per_buy(users.owner, 0)


class TestFees:
    """Pricing and liquidity fee settings."""

    @pytest.mark.asyncio
    async def test_fee_free_buy(self, protocol, member, users):
        await protocol.set_fee(users.owner, 0, 0)
        await member(users.alice)

        result = await protocol.buy(users.alice, HUNDRED)

        assert result.tokens_out == HUNDRED
        assert result.withheld == 0
        assert await protocol.reserves() == (HUNDRED, HUNDRED)
        assert await protocol.pending_rewards() == 0

    @pytest.mark.asyncio
    async def test_zero_fee_recipient_rejected(self, protocol, users):
        with pytest.raises(ConfigurationError):
            await protocol.set_fee_to(users.owner, "0x0000000000000000000000000000000000000000")
