"""Integration tests for auto-withdraw and the periodic sweep."""

from unittest.mock import AsyncMock

import pytest

from app.config.business_constants import DAY_SECONDS
from app.utils.exceptions import NothingToWithdrawError, WithdrawNotReadyError
from calculator import PRECISION
from jobs.tasks import auto_withdraw as auto_withdraw_task
from jobs.tasks.auto_withdraw import SweepResult, run_auto_withdraw_sweep

HUNDRED = 100 * PRECISION
STARTING_BALANCE = 10_000 * PRECISION
TIER_0_PRICE = 150 * PRECISION


class TestAutoWithdraw:
    """Tests for closing matured positions."""

    @pytest.mark.asyncio
    async def test_nothing_to_withdraw(self, protocol, member, users):
        await member(users.alice)

        with pytest.raises(NothingToWithdrawError):
            await protocol.auto_withdraw(users.bob, users.alice)

    @pytest.mark.asyncio
    async def test_not_ready_before_delay(self, protocol, member, users, clock):
        await member(users.alice)
        opened = clock.now
        await protocol.buy(users.alice, HUNDRED)

        assert await protocol.withdraw_available_at(users.alice) == opened + 30 * DAY_SECONDS

        clock.advance(30 * DAY_SECONDS - 1)
        with pytest.raises(WithdrawNotReadyError):
            await protocol.auto_withdraw(users.bob, users.alice)

    @pytest.mark.asyncio
    async def test_reinvests_for_subscribed_account(self, protocol, member, users, clock):
        """Payout goes back through the buy path while the subscription is valid."""
        await protocol.set_auto_withdraw_delay(users.owner, DAY_SECONDS)
        await member(users.alice)
        opened = clock.now
        await protocol.buy(users.alice, HUNDRED)
        balance_before = await protocol.asset_balance_of(users.alice)
        clock.advance(DAY_SECONDS)

        result = await protocol.auto_withdraw(users.bob, users.alice)

        assert result.payout == 99_500_000_000_000_000_000
        assert result.reinvestment is not None
        assert result.reinvestment.reinvested
        assert result.reinvestment.tokens_out == 97_012_500_000_000_000_000
        assert await protocol.magna_balance(users.alice) == 97_012_500_000_000_000_000
        assert await protocol.deposit_history_length(users.alice) == 1
        assert await protocol.withdraw_available_at(users.alice) == opened + 2 * DAY_SECONDS
        assert await protocol.asset_balance_of(users.alice) == balance_before
        assert await protocol.pending_rewards() == 997_500_000_000_000_000

    @pytest.mark.asyncio
    async def test_reinvestment_counts_towards_limit(self, protocol, member, users, clock):
        await protocol.set_auto_withdraw_delay(users.owner, DAY_SECONDS)
        await member(users.alice)
        await protocol.buy(users.alice, HUNDRED)
        clock.advance(DAY_SECONDS)

        await protocol.auto_withdraw(users.bob, users.alice)

        assert await protocol.get_purchase_limit(users.alice) == 900_500_000_000_000_000_000

    @pytest.mark.asyncio
    async def test_transfers_out_after_subscription_lapses(self, protocol, member, users, clock):
        await member(users.alice)
        await protocol.buy(users.alice, HUNDRED)
        clock.advance(30 * DAY_SECONDS)

        result = await protocol.auto_withdraw(users.bob, users.alice)

        assert result.reinvestment is None
        assert await protocol.magna_balance(users.alice) == 0
        assert await protocol.deposit_history_length(users.alice) == 0
        assert await protocol.withdraw_available_at(users.alice) is None
        assert await protocol.asset_balance_of(users.alice) == (
            STARTING_BALANCE - TIER_0_PRICE - HUNDRED + result.payout
        )

    @pytest.mark.asyncio
    async def test_matured_accounts(self, protocol, member, users, clock):
        await protocol.set_auto_withdraw_delay(users.owner, DAY_SECONDS)
        await member(users.alice)
        await member(users.bob)
        await protocol.buy(users.alice, HUNDRED)
        clock.advance(DAY_SECONDS // 2)
        await protocol.buy(users.bob, HUNDRED)

        clock.advance(DAY_SECONDS // 2)
        assert await protocol.matured_accounts() == [users.alice]

        clock.advance(DAY_SECONDS // 2)
        assert await protocol.matured_accounts() == [users.alice, users.bob]


class TestSweep:
    """Tests for the auto-withdraw sweep."""

    @pytest.mark.asyncio
    async def test_sweep_processes_matured_only(self, protocol, member, users, clock):
        await protocol.set_auto_withdraw_delay(users.owner, DAY_SECONDS)
        await member(users.alice)
        await member(users.bob)
        await protocol.buy(users.alice, HUNDRED)
        await protocol.buy(users.bob, HUNDRED)
        clock.advance(DAY_SECONDS // 2)
        await member(users.carol)
        carol_bought = await protocol.buy(users.carol, HUNDRED)
        clock.advance(DAY_SECONDS // 2)

        result = await run_auto_withdraw_sweep(protocol, users.stranger)

        assert result.processed == [users.alice, users.bob]
        assert result.reinvested == [users.alice, users.bob]
        assert result.failed == {}
        assert result.paid_out == 0
        assert await protocol.magna_balance(users.carol) == carol_bought.tokens_out

    @pytest.mark.asyncio
    async def test_sweep_pays_out_lapsed_accounts(self, protocol, member, users, clock):
        await member(users.alice)
        await protocol.buy(users.alice, HUNDRED)
        clock.advance(30 * DAY_SECONDS)

        result = await run_auto_withdraw_sweep(protocol, users.owner)

        assert result.processed == [users.alice]
        assert result.reinvested == []
        assert result.paid_out == 99_500_000_000_000_000_000

    @pytest.mark.asyncio
    async def test_sweep_continues_after_failure(self, protocol, member, users, clock, monkeypatch):
        """One failing account is recorded and the rest are processed."""
        await protocol.set_auto_withdraw_delay(users.owner, DAY_SECONDS)
        await member(users.alice)
        await member(users.bob)
        await protocol.buy(users.alice, HUNDRED)
        await protocol.buy(users.bob, HUNDRED)
        clock.advance(DAY_SECONDS)

        real_auto_withdraw = protocol.auto_withdraw

        async def flaky_auto_withdraw(caller, account):
            if account == users.alice:
                raise WithdrawNotReadyError()
            return await real_auto_withdraw(caller, account)

        monkeypatch.setattr(protocol, "auto_withdraw", flaky_auto_withdraw)

        result = await run_auto_withdraw_sweep(protocol, users.owner)

        assert result.failed == {users.alice: "withdraw_not_ready"}
        assert result.processed == [users.bob]

    @pytest.mark.asyncio
    async def test_sweep_with_nothing_matured(self, protocol):
        result = await run_auto_withdraw_sweep(protocol)

        assert result == SweepResult()


class TestSweepActor:
    """Tests for the dramatiq actor wrapper."""

    def test_actor_runs_sweep(self, monkeypatch):
        sweep = AsyncMock(return_value=SweepResult(processed=["0xabc"]))
        monkeypatch.setattr(auto_withdraw_task, "_sweep_async", sweep)

        auto_withdraw_task.sweep_auto_withdrawals("0xcaller")

        sweep.assert_awaited_once_with("0xcaller")

    def test_actor_skips_when_locked(self, monkeypatch):
        sweep = AsyncMock(return_value=None)
        monkeypatch.setattr(auto_withdraw_task, "_sweep_async", sweep)

        auto_withdraw_task.sweep_auto_withdrawals()

        sweep.assert_awaited_once_with(None)

    def test_actor_swallows_sweep_errors(self, monkeypatch):
        """Failures are logged so the worker keeps running."""
        sweep = AsyncMock(side_effect=RuntimeError("database unavailable"))
        monkeypatch.setattr(auto_withdraw_task, "_sweep_async", sweep)

        auto_withdraw_task.sweep_auto_withdrawals()

        sweep.assert_awaited_once()
