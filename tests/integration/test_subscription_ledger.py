"""Integration tests for the referral & subscription ledger."""

import pytest

from app.config.business_constants import DAY_SECONDS
from app.services.referral.signature import sign_subscription_code
from app.utils.exceptions import (
    InsufficientAllowanceError,
    InvalidSignatureError,
    InvalidTierError,
    NonceAlreadyUsedError,
    NotOwnerError,
    ReferralAlreadyBoundError,
    ReferralCycleError,
    ReferralNotSubscribedError,
    SelfReferralError,
)
from calculator import PRECISION

STARTING_BALANCE = 10_000 * PRECISION


class TestSubscribe:
    """Tests for paid subscriptions."""

    @pytest.mark.asyncio
    async def test_subscribe_under_root(self, protocol, member, users, clock):
        """Root is a valid referral without its own subscription."""
        start = clock.now
        info = await member(users.alice)

        assert info.referral == users.root
        assert info.subscription_level == 0
        assert info.registered_at == start
        assert info.subscription_expires_at == start + 30 * DAY_SECONDS
        assert info.is_valid
        assert await protocol.subscription_is_valid(users.alice)
        assert await protocol.users_by_referral(users.root) == [users.alice]

    @pytest.mark.asyncio
    async def test_payment_split(self, protocol, member, users):
        """Tier price is pulled and split between guarantee and treasury."""
        await member(users.bob, tier=1)

        assert await protocol.asset_balance_of(users.bob) == STARTING_BALANCE - 550 * PRECISION
        assert await protocol.asset_balance_of(users.guarantee) == 275 * PRECISION
        assert await protocol.asset_balance_of(users.treasury) == 275 * PRECISION
        assert await protocol.asset_balance_of(users.ledger) == 0

    @pytest.mark.asyncio
    async def test_payment_remainder_goes_to_owner(self, protocol, member, users):
        await protocol.set_subscription_fee(users.owner, 200, 300, 1_000)

        await member(users.alice)

        assert await protocol.asset_balance_of(users.guarantee) == 30 * PRECISION
        assert await protocol.asset_balance_of(users.treasury) == 45 * PRECISION
        assert await protocol.asset_balance_of(users.owner) == 75 * PRECISION

    @pytest.mark.asyncio
    async def test_invalid_tier(self, protocol, fund, users):
        await fund(users.alice)

        with pytest.raises(InvalidTierError):
            await protocol.subscribe(users.alice, users.root, 3)

    @pytest.mark.asyncio
    async def test_unsubscribed_referral(self, protocol, fund, users):
        await fund(users.alice)

        with pytest.raises(ReferralNotSubscribedError):
            await protocol.subscribe(users.alice, users.stranger, 0)

    @pytest.mark.asyncio
    async def test_expired_referral(self, protocol, member, fund, users, clock):
        """Linking under a lapsed subscription fails."""
        await member(users.alice)
        clock.advance(30 * DAY_SECONDS)
        await fund(users.bob)

        with pytest.raises(ReferralNotSubscribedError):
            await protocol.subscribe(users.bob, users.alice, 0)

    @pytest.mark.asyncio
    async def test_valid_referral_adds_downline(self, protocol, member, users):
        await member(users.alice)
        await member(users.bob, users.alice)
        await member(users.carol, users.alice)

        assert await protocol.users_by_referral(users.alice) == [users.bob, users.carol]
        assert await protocol.get_recruitors(users.bob) == [users.alice, users.root]

    @pytest.mark.asyncio
    async def test_self_referral(self, protocol, member, users):
        await member(users.alice)

        with pytest.raises(SelfReferralError):
            await protocol.subscribe(users.alice, users.alice, 0)

    @pytest.mark.asyncio
    async def test_insufficient_allowance_rolls_back(self, protocol, users):
        """A failed payment leaves no account record behind."""
        await protocol.asset_mint(users.owner, users.alice, STARTING_BALANCE)

        with pytest.raises(InsufficientAllowanceError):
            await protocol.subscribe(users.alice, users.root, 0)

        info = await protocol.user_info(users.alice)
        assert info.registered_at == 0
        assert not info.is_valid
        assert await protocol.users_by_referral(users.root) == []


class TestRebinding:
    """Tests for referral link rebinding."""

    @pytest.mark.asyncio
    async def test_rebind_rejected_while_referral_valid(self, protocol, member, users):
        await member(users.alice)
        await member(users.carol)
        await member(users.bob, users.alice)

        with pytest.raises(ReferralAlreadyBoundError):
            await protocol.subscribe(users.bob, users.carol, 0)

    @pytest.mark.asyncio
    async def test_renewal_under_same_referral(self, protocol, member, users, clock):
        await member(users.alice)
        await member(users.bob, users.alice)
        clock.advance(DAY_SECONDS)

        info = await protocol.subscribe(users.bob, users.alice, 2)

        assert info.subscription_level == 2
        assert info.subscription_expires_at == clock.now + 30 * DAY_SECONDS
        assert await protocol.users_by_referral(users.alice) == [users.bob]

    @pytest.mark.asyncio
    async def test_rebind_after_referral_lapses(self, protocol, member, users, clock):
        """Downline sets follow the rebound link."""
        await member(users.alice)
        await member(users.bob, users.alice)
        clock.advance(31 * DAY_SECONDS)
        await member(users.carol)

        await protocol.subscribe(users.bob, users.carol, 0)

        assert await protocol.users_by_referral(users.alice) == []
        assert await protocol.users_by_referral(users.carol) == [users.bob]
        assert await protocol.get_recruitors(users.bob) == [users.carol, users.root]

    @pytest.mark.asyncio
    async def test_cycle_rejected(self, protocol, member, users, clock):
        """An account cannot be linked under its own downline."""
        await member(users.alice)
        clock.advance(20 * DAY_SECONDS)
        await member(users.bob, users.alice)
        await member(users.carol, users.bob)
        clock.advance(15 * DAY_SECONDS)  # alice lapsed, bob and carol valid

        with pytest.raises(ReferralCycleError):
            await protocol.subscribe(users.bob, users.carol, 0)


class TestSubscribeWithCode:
    """Tests for signature-gated subscriptions."""

    @pytest.mark.asyncio
    async def test_code_subscription(self, protocol, users, signer):
        """A code grants the code tier without payment."""
        signature = sign_subscription_code(signer.key, 42)

        info = await protocol.subscribe_with_code(users.alice, users.root, 42, signature)

        assert info.is_valid
        assert info.subscription_level == 0
        assert await protocol.asset_balance_of(users.alice) == 0

    @pytest.mark.asyncio
    async def test_code_tier_setting(self, protocol, users, signer):
        await protocol.set_code_tier(users.owner, 2)
        signature = sign_subscription_code(signer.key, 1)

        info = await protocol.subscribe_with_code(users.alice, users.root, 1, signature)

        assert info.subscription_level == 2

    @pytest.mark.asyncio
    async def test_replay_rejected_for_any_account(self, protocol, users, signer):
        signature = sign_subscription_code(signer.key, 42)
        await protocol.subscribe_with_code(users.alice, users.root, 42, signature)

        with pytest.raises(NonceAlreadyUsedError):
            await protocol.subscribe_with_code(users.alice, users.root, 42, signature)
        with pytest.raises(NonceAlreadyUsedError):
            await protocol.subscribe_with_code(users.bob, users.root, 42, signature)

    @pytest.mark.asyncio
    async def test_bad_signature(self, protocol, users, signer):
        signature = sign_subscription_code(signer.key, 42)

        with pytest.raises(InvalidSignatureError):
            await protocol.subscribe_with_code(users.alice, users.root, 43, signature)

    @pytest.mark.asyncio
    async def test_failed_link_does_not_consume_nonce(self, protocol, users, signer):
        """The nonce stays usable when linking fails."""
        signature = sign_subscription_code(signer.key, 5)

        with pytest.raises(ReferralNotSubscribedError):
            await protocol.subscribe_with_code(users.alice, users.stranger, 5, signature)

        info = await protocol.subscribe_with_code(users.alice, users.root, 5, signature)
        assert info.is_valid


class TestTierTable:
    """Tests for tier table edits."""

    @pytest.mark.asyncio
    async def test_default_tiers(self, protocol):
        tiers = await protocol.tiers()

        assert [t.price for t in tiers] == [150 * PRECISION, 550 * PRECISION, 970 * PRECISION]

    @pytest.mark.asyncio
    async def test_edit_and_append(self, protocol, users):
        await protocol.change_subscription(users.owner, 0, 10 * PRECISION, DAY_SECONDS, 50 * PRECISION)
        await protocol.change_subscription(users.owner, 3, 2_000 * PRECISION, DAY_SECONDS, 9_000 * PRECISION)

        tiers = await protocol.tiers()
        assert len(tiers) == 4
        assert tiers[0].price == 10 * PRECISION
        assert tiers[3].max_cumulative_deposit == 9_000 * PRECISION

    @pytest.mark.asyncio
    async def test_edit_out_of_range(self, protocol, users):
        with pytest.raises(InvalidTierError):
            await protocol.change_subscription(users.owner, 5, PRECISION, DAY_SECONDS, PRECISION)

    @pytest.mark.asyncio
    async def test_edit_requires_owner(self, protocol, users):
        with pytest.raises(NotOwnerError):
            await protocol.change_subscription(users.alice, 0, PRECISION, DAY_SECONDS, PRECISION)

    @pytest.mark.asyncio
    async def test_edit_does_not_touch_existing_accounts(self, protocol, member, users):
        """Recorded tier and expiry are frozen at subscribe time."""
        before = await member(users.alice)

        await protocol.change_subscription(users.owner, 0, PRECISION, DAY_SECONDS, PRECISION)

        after = await protocol.user_info(users.alice)
        assert after.subscription_expires_at == before.subscription_expires_at
        assert after.subscription_level == 0
