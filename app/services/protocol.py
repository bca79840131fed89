"""
Token sale protocol facade.

Single entry point for the referral ledger, liquidity pool, trading
engine and asset ledger. Every call runs under one lock and one database
transaction, so a failed call leaves no trace in any of them.
"""

import asyncio

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from calculator.core.models import BuyQuote
from app.config import business_constants as bc
from app.config.settings import Settings, settings as default_settings
from app.repositories.asset_repository import AssetRegistryRepository
from app.repositories.config_repository import (
    AssetLedgerConfigRepository,
    LedgerConfigRepository,
    PoolStateRepository,
    TradingConfigRepository,
)
from app.repositories.base import SINGLETON_ID
from app.repositories.subscription_tier_repository import SubscriptionTierRepository
from app.services.base_service import atomic
from app.services.referral.signature import EthSignatureVerifier, SignatureVerifier
from app.services.referral.subscription_service import AccountInfo, TierInfo
from app.services.trading.results import BuyResult, SellResult
from app.services.trading.trading_service import TradingService
from app.utils.datetime_utils import Clock, unix_now


class TokenSaleProtocol:
    """
    Combined Pool + Ledger + Trading Engine state machine.

    Usage:
        protocol = TokenSaleProtocol(session_maker)
        await protocol.bootstrap()
        await protocol.subscribe(alice, root, 0)
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
        clock: Clock | None = None,
        verifier: SignatureVerifier | None = None,
    ) -> None:
        self.session_maker = session_maker
        self.settings = settings or default_settings
        self.clock = clock or unix_now
        self.verifier = verifier or EthSignatureVerifier(
            self.settings.trusted_signer_address
        )
        self.lock = asyncio.Lock()
        self.logger = logger.bind(service=self.__class__.__name__)

    def _trading(self, session: AsyncSession) -> TradingService:
        return TradingService(session, self.settings, self.clock)

    # Setup

    @atomic
    async def bootstrap(self, session: AsyncSession) -> bool:
        """
        Seed configuration rows, the tier table and contract registry.

        Idempotent: returns False when already initialized.
        """
        s = self.settings
        if await TradingConfigRepository(session).get_singleton() is not None:
            self.logger.debug("Protocol already initialized")
            return False

        await LedgerConfigRepository(session).create(
            id=SINGLETON_ID,
            guarantee_share=s.subscription_guarantee_share,
            treasury_share=s.subscription_treasury_share,
            share_denominator=s.subscription_share_denominator,
            code_tier=s.code_subscription_tier,
        )
        tier_repo = SubscriptionTierRepository(session)
        for index, tier in enumerate(bc.SUBSCRIPTION_TIERS):
            await tier_repo.create(
                tier_index=index,
                price=tier.price,
                duration_seconds=tier.duration_seconds,
                max_cumulative_deposit=tier.max_cumulative_deposit,
            )
        await PoolStateRepository(session).create(
            id=SINGLETON_ID,
            reserve_token=0,
            reserve_base=0,
            trader=s.trading_engine_address,
        )
        await TradingConfigRepository(session).create(
            id=SINGLETON_ID,
            pricing_fee_bps=s.pricing_fee_bps,
            liquidity_fee_bps=s.liquidity_fee_bps,
            max_amount_per_buy=s.max_amount_per_buy,
            max_purchase=s.max_purchase,
            purchase_cooldown=s.purchase_cooldown,
            user_share_bps=s.user_share_bps,
            commission_ladder_bps=list(s.commission_ladder_bps),
            commission_depth_by_tier=list(s.commission_depth_by_tier),
            success_reward_bps=s.success_reward_bps,
            success_reward_requirement=s.success_reward_requirement,
            auto_withdraw_delay=s.auto_withdraw_delay,
            fee_to=s.fee_to_address,
            pending_balance=0,
        )
        await AssetLedgerConfigRepository(session).create(
            id=SINGLETON_ID,
            owner=s.owner_address,
            guarantee_fee=s.asset_guarantee_fee,
            treasury_fee=s.asset_treasury_fee,
            fee_denominator=s.asset_fee_denominator,
            guarantee_addr=s.guarantee_address,
            treasury_addr=s.treasury_address,
            whitelist_fee_exempt=s.whitelist_fee_exempt,
        )

        registry = AssetRegistryRepository(session)
        for contract in (
            s.trading_engine_address,
            s.pool_address,
            s.referral_ledger_address,
        ):
            await registry.register_contract(contract)
            if not await registry.is_whitelisted(contract):
                await registry.add_whitelist(contract)

        self.logger.info(
            "Protocol initialized",
            extra={
                "owner": s.owner_address,
                "trading_engine": s.trading_engine_address,
                "tiers": len(bc.SUBSCRIPTION_TIERS),
            },
        )
        return True

    # Referral & subscription ledger

    @atomic
    async def subscribe(
        self, session: AsyncSession, caller: str, referral: str, tier_index: int
    ) -> AccountInfo:
        ledger = self._trading(session).ledger
        await ledger.subscribe(caller, referral, tier_index)
        return await ledger.user_info(caller)

    @atomic
    async def subscribe_with_code(
        self,
        session: AsyncSession,
        caller: str,
        referral: str,
        nonce: int,
        signature: bytes | str,
    ) -> AccountInfo:
        ledger = self._trading(session).ledger
        await ledger.subscribe_with_code(caller, referral, nonce, signature, self.verifier)
        return await ledger.user_info(caller)

    @atomic
    async def subscription_is_valid(self, session: AsyncSession, address: str) -> bool:
        return await self._trading(session).ledger.subscription_is_valid(address)

    @atomic
    async def user_info(self, session: AsyncSession, address: str) -> AccountInfo:
        return await self._trading(session).ledger.user_info(address)

    @atomic
    async def get_recruitors(self, session: AsyncSession, address: str) -> list[str]:
        return await self._trading(session).ledger.get_recruitors(address)

    @atomic
    async def users_by_referral(self, session: AsyncSession, address: str) -> list[str]:
        return await self._trading(session).ledger.users_by_referral(address)

    @atomic
    async def tiers(self, session: AsyncSession) -> list[TierInfo]:
        return await self._trading(session).ledger.list_tiers()

    @atomic
    async def change_subscription(
        self,
        session: AsyncSession,
        caller: str,
        tier_index: int,
        price: int,
        duration_seconds: int,
        max_cumulative_deposit: int,
    ) -> None:
        await self._trading(session).ledger.change_subscription(
            caller, tier_index, price, duration_seconds, max_cumulative_deposit
        )

    @atomic
    async def set_subscription_fee(
        self,
        session: AsyncSession,
        caller: str,
        guarantee_share: int,
        treasury_share: int,
        denominator: int,
    ) -> None:
        await self._trading(session).ledger.set_subscription_fee(
            caller, guarantee_share, treasury_share, denominator
        )

    @atomic
    async def set_code_tier(self, session: AsyncSession, caller: str, tier_index: int) -> None:
        await self._trading(session).ledger.set_code_tier(caller, tier_index)

    # Liquidity pool

    @atomic
    async def reserves(self, session: AsyncSession) -> tuple[int, int]:
        return await self._trading(session).pool.reserves()

    @atomic
    async def current_price(self, session: AsyncSession) -> int:
        return await self._trading(session).pool.current_price()

    @atomic
    async def set_trader(self, session: AsyncSession, caller: str, trader: str) -> None:
        await self._trading(session).pool.set_trader(caller, trader)

    # Trading engine

    @atomic
    async def buy(self, session: AsyncSession, caller: str, amount: int) -> BuyResult:
        return await self._trading(session).buy(caller, amount)

    @atomic
    async def sell(self, session: AsyncSession, caller: str, token_amount: int) -> SellResult:
        return await self._trading(session).sell(caller, token_amount)

    @atomic
    async def auto_withdraw(
        self, session: AsyncSession, caller: str, account: str
    ) -> SellResult:
        return await self._trading(session).auto_withdraw(caller, account)

    @atomic
    async def quote_buy(self, session: AsyncSession, amount: int) -> BuyQuote:
        return await self._trading(session).quote_buy(amount)

    @atomic
    async def magna_balance(self, session: AsyncSession, address: str) -> int:
        return await self._trading(session).magna_balance(address)

    @atomic
    async def deposit_history_length(self, session: AsyncSession, address: str) -> int:
        return await self._trading(session).deposit_history_length(address)

    @atomic
    async def get_purchase_limit(self, session: AsyncSession, address: str) -> int:
        return await self._trading(session).get_purchase_limit(address)

    @atomic
    async def cost_basis_of(self, session: AsyncSession, address: str) -> int:
        return await self._trading(session).cost_basis_of(address)

    @atomic
    async def withdraw_available_at(self, session: AsyncSession, address: str) -> int | None:
        return await self._trading(session).withdraw_available_at(address)

    @atomic
    async def earnings_of(
        self, session: AsyncSession, address: str, kind: str | None = None
    ) -> int:
        return await self._trading(session).earnings_of(address, kind)

    @atomic
    async def matured_accounts(self, session: AsyncSession) -> list[str]:
        return await self._trading(session).matured_accounts()

    @atomic
    async def pending_rewards(self, session: AsyncSession) -> int:
        return await self._trading(session).pending_rewards()

    @atomic
    async def withdraw_rewards(self, session: AsyncSession, caller: str, amount: int) -> int:
        return await self._trading(session).withdraw_rewards(caller, amount)

    @atomic
    async def withdraw_all(self, session: AsyncSession, caller: str) -> int:
        return await self._trading(session).withdraw_all(caller)

    # Trading admin

    @atomic
    async def set_fee(
        self,
        session: AsyncSession,
        caller: str,
        pricing_fee_bps: int,
        liquidity_fee_bps: int,
    ) -> None:
        await self._trading(session).set_fee(caller, pricing_fee_bps, liquidity_fee_bps)

    @atomic
    async def set_withdraw_profit_fee(
        self, session: AsyncSession, caller: str, fee_bps: int
    ) -> None:
        await self._trading(session).set_withdraw_profit_fee(caller, fee_bps)

    @atomic
    async def set_withdraw_profit_distribution(
        self, session: AsyncSession, caller: str, ladder_bps: list[int]
    ) -> None:
        await self._trading(session).set_withdraw_profit_distribution(caller, ladder_bps)

    @atomic
    async def set_commission_depth_policy(
        self, session: AsyncSession, caller: str, depth_by_tier: list[int]
    ) -> None:
        await self._trading(session).set_commission_depth_policy(caller, depth_by_tier)

    @atomic
    async def set_success_reward(
        self, session: AsyncSession, caller: str, reward_bps: int
    ) -> None:
        await self._trading(session).set_success_reward(caller, reward_bps)

    @atomic
    async def set_success_reward_requirement(
        self, session: AsyncSession, caller: str, min_profit: int
    ) -> None:
        await self._trading(session).set_success_reward_requirement(caller, min_profit)

    @atomic
    async def set_purchase_cooldown(
        self, session: AsyncSession, caller: str, seconds: int
    ) -> None:
        await self._trading(session).set_purchase_cooldown(caller, seconds)

    @atomic
    async def set_max_purchase(self, session: AsyncSession, caller: str, amount: int) -> None:
        await self._trading(session).set_max_purchase(caller, amount)

    @atomic
    async def set_max_amount_per_buy(
        self, session: AsyncSession, caller: str, amount: int
    ) -> None:
        await self._trading(session).set_max_amount_per_buy(caller, amount)

    @atomic
    async def set_auto_withdraw_delay(
        self, session: AsyncSession, caller: str, seconds: int
    ) -> None:
        await self._trading(session).set_auto_withdraw_delay(caller, seconds)

    @atomic
    async def set_fee_to(self, session: AsyncSession, caller: str, fee_to: str) -> None:
        await self._trading(session).set_fee_to(caller, fee_to)

    # Asset ledger

    @atomic
    async def asset_transfer(
        self, session: AsyncSession, sender: str, to: str, amount: int
    ) -> int:
        return await self._trading(session).asset.transfer(sender, to, amount)

    @atomic
    async def asset_approve(
        self, session: AsyncSession, owner: str, spender: str, amount: int
    ) -> None:
        await self._trading(session).asset.approve(owner, spender, amount)

    @atomic
    async def asset_transfer_from(
        self, session: AsyncSession, spender: str, owner: str, to: str, amount: int
    ) -> int:
        return await self._trading(session).asset.transfer_from(spender, owner, to, amount)

    @atomic
    async def asset_balance_of(self, session: AsyncSession, address: str) -> int:
        return await self._trading(session).asset.balance_of(address)

    @atomic
    async def asset_allowance(
        self, session: AsyncSession, owner: str, spender: str
    ) -> int:
        return await self._trading(session).asset.allowance(owner, spender)

    @atomic
    async def asset_mint(self, session: AsyncSession, caller: str, to: str, amount: int) -> None:
        await self._trading(session).asset.mint(caller, to, amount)

    @atomic
    async def add_whitelist(self, session: AsyncSession, caller: str, address: str) -> None:
        await self._trading(session).asset.add_whitelist(caller, address)

    @atomic
    async def remove_whitelist(self, session: AsyncSession, caller: str, address: str) -> None:
        await self._trading(session).asset.remove_whitelist(caller, address)

    @atomic
    async def register_contract(self, session: AsyncSession, caller: str, address: str) -> None:
        await self._trading(session).asset.register_contract(caller, address)

    @atomic
    async def set_asset_fee(
        self,
        session: AsyncSession,
        caller: str,
        guarantee_fee: int,
        treasury_fee: int,
        denominator: int,
    ) -> None:
        await self._trading(session).asset.set_fee(
            caller, guarantee_fee, treasury_fee, denominator
        )

    @atomic
    async def set_guarantee_addr(self, session: AsyncSession, caller: str, address: str) -> None:
        await self._trading(session).asset.set_guarantee_addr(caller, address)

    @atomic
    async def set_treasury_addr(self, session: AsyncSession, caller: str, address: str) -> None:
        await self._trading(session).asset.set_treasury_addr(caller, address)
