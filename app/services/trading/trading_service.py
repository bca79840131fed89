"""
Trading engine service.

Orchestrates chunked buys against the liquidity pool, sell settlement
with profit sharing across the referral chain, and the auto-withdraw /
reinvest cycle. All base asset moves through the asset ledger under the
engine's own address; pool reserves are bookkeeping on top of it.
"""

from calculator import CurveCalculator, format_amount, mul_div, split_chunks, value_of
from calculator.core.models import BuyQuote, ProfitSplit
from app.config.business_constants import BPS_DENOMINATOR
from app.models.commission_earning import EarningKind
from app.models.position import Position
from app.models.trading_config import TradingConfig
from app.repositories.account_repository import AccountRepository
from app.repositories.config_repository import TradingConfigRepository
from app.repositories.deposit_repository import DepositRepository, PositionRepository
from app.repositories.earning_repository import CommissionEarningRepository
from app.repositories.subscription_tier_repository import SubscriptionTierRepository
from app.services.asset_ledger_service import AssetLedgerService
from app.services.base_service import BaseService
from app.services.pool.liquidity_pool import LiquidityPoolService
from app.services.referral.commission_processor import ReferralCommissionProcessor
from app.services.referral.subscription_service import SubscriptionService
from app.services.trading.admin import TradingAdminMixin
from app.services.trading.purchase_limits import PurchaseLimitMixin
from app.services.trading.results import BuyResult, SellResult
from app.utils.exceptions import (
    AuthorizationError,
    ConfigurationError,
    InsufficientTokenBalanceError,
    InvalidAmountError,
    NothingToWithdrawError,
    PurchaseLimitExceededError,
    SubscriptionRequiredError,
    WithdrawNotReadyError,
)
from app.utils.validation import normalize_address


class TradingService(PurchaseLimitMixin, TradingAdminMixin, BaseService):
    """
    Trading engine.

    Combines:
    - PurchaseLimitMixin: rolling purchase window
    - TradingAdminMixin: owner-gated configuration
    """

    def __init__(self, session, settings=None, clock=None) -> None:
        super().__init__(session, settings, clock)
        self.config_repo = TradingConfigRepository(session)
        self.account_repo = AccountRepository(session)
        self.tier_repo = SubscriptionTierRepository(session)
        self.deposit_repo = DepositRepository(session)
        self.position_repo = PositionRepository(session)
        self.earning_repo = CommissionEarningRepository(session)

        self.pool = LiquidityPoolService(session, self.settings, self.clock)
        self.asset = AssetLedgerService(session, self.settings, self.clock)
        self.ledger = SubscriptionService(session, self.settings, self.clock)
        self.commissions = ReferralCommissionProcessor(
            session, self.settings.max_referral_depth
        )
        self.address = self.settings.trading_engine_address

    async def get_config(self) -> TradingConfig:
        config = await self.config_repo.get_singleton()
        if config is None:
            raise ConfigurationError("Trading engine is not initialized")
        return config

    # Buy

    async def buy(self, caller: str, amount: int) -> BuyResult:
        """
        Buy tokens with base asset.

        Args:
            caller: Buying account (must have approved the engine)
            amount: Total base amount

        Returns:
            BuyResult with tokens credited

        Raises:
            InvalidAmountError: Amount is not positive
            SubscriptionRequiredError: Caller has no valid subscription
            PurchaseLimitExceededError: Amount exceeds the rolling limit
            InsufficientAllowanceError: Engine allowance too low
        """
        caller = normalize_address(caller)
        if amount <= 0:
            raise InvalidAmountError()

        if not await self.ledger.subscription_is_valid(caller):
            self.logger.warning("Buy without subscription", extra={"caller": caller})
            raise SubscriptionRequiredError()

        limit = await self.get_purchase_limit(caller)
        if amount > limit:
            self.logger.warning(
                "Purchase limit exceeded",
                extra={
                    "caller": caller,
                    "amount": format_amount(amount),
                    "limit": format_amount(limit),
                },
            )
            raise PurchaseLimitExceededError(
                f"Amount {amount} exceeds remaining limit {limit}"
            )

        received = await self.asset.transfer_from(self.address, caller, self.address, amount)
        return await self._execute_buy(caller, received, charged=amount)

    async def quote_buy(self, amount: int) -> BuyQuote:
        """Simulate a buy against current reserves without changing state."""
        if amount <= 0:
            raise InvalidAmountError()
        config = await self.get_config()
        reserve_token, reserve_base = await self.pool.reserves()
        return self._calculator(config).simulate_buy(
            amount, reserve_token, reserve_base, config.max_amount_per_buy
        )

    async def _execute_buy(
        self,
        account: str,
        amount: int,
        reinvested: bool = False,
        charged: int | None = None,
    ) -> BuyResult:
        """
        Price `amount` in chunks and record one deposit entry per chunk.

        `charged` is what the account paid before any transfer fee; it is
        spread over the chunks pro rata for the purchase window.
        """
        charged = amount if charged is None else charged
        config = await self.get_config()
        calculator = self._calculator(config)
        position = await self.position_repo.get_or_create(account)
        now = self.now()

        result = BuyResult(
            account=account,
            amount=amount,
            tokens_out=0,
            base_credited=0,
            withheld=0,
            chunks=0,
            reinvested=reinvested,
        )
        chunks = split_chunks(amount, config.max_amount_per_buy)
        window_left = charged
        for index, chunk in enumerate(chunks):
            if index == len(chunks) - 1:
                window_amount = window_left
            else:
                window_amount = mul_div(chunk, charged, amount)
            window_left -= window_amount

            # Price is re-read after every chunk
            reserve_token, reserve_base = await self.pool.reserves()
            fill = calculator.price_chunk(chunk, reserve_token, reserve_base)
            await self.pool.add_buy(self.address, fill.tokens_out, fill.base_credited)

            await self.deposit_repo.create(
                address=account,
                amount_base=chunk,
                window_amount=window_amount,
                base_credited=fill.base_credited,
                token_amount=fill.tokens_out,
                timestamp=now,
                is_closed=False,
                reinvested=reinvested,
            )
            result.tokens_out += fill.tokens_out
            result.base_credited += fill.base_credited
            result.chunks += 1

        result.withheld = amount - result.base_credited
        position.token_balance += result.tokens_out
        position.cost_basis += result.base_credited
        if position.opened_at is None:
            position.opened_at = now
        config.pending_balance += result.withheld
        await self.session.flush()

        self.logger.info(
            "Buy executed",
            extra={
                "account": account,
                "amount": format_amount(amount),
                "tokens_out": format_amount(result.tokens_out),
                "chunks": result.chunks,
                "withheld": format_amount(result.withheld),
                "reinvested": reinvested,
            },
        )
        return result

    # Sell

    async def sell(self, caller: str, token_amount: int) -> SellResult:
        """
        Sell tokens and realize profit.

        Raises:
            InvalidAmountError: Amount is not positive
            InsufficientTokenBalanceError: Amount exceeds held balance
        """
        caller = normalize_address(caller)
        if token_amount <= 0:
            raise InvalidAmountError()

        position = await self.position_repo.get_by_address(caller)
        held = position.token_balance if position else 0
        if token_amount > held:
            self.logger.warning(
                "Sell exceeds balance",
                extra={
                    "caller": caller,
                    "token_amount": format_amount(token_amount),
                    "balance": format_amount(held),
                },
            )
            raise InsufficientTokenBalanceError()

        result = await self._settle(caller, position, token_amount)
        if result.payout:
            await self.asset.transfer(self.address, caller, result.payout)
        return result

    async def auto_withdraw(self, caller: str, account: str) -> SellResult:
        """
        Close a matured position on behalf of any caller.

        The payout is reinvested through the buy path while the account's
        subscription is valid, and transferred out otherwise.

        Raises:
            NothingToWithdrawError: Account holds no tokens
            WithdrawNotReadyError: Maturity timer has not elapsed
        """
        caller = normalize_address(caller)
        account = normalize_address(account)

        position = await self.position_repo.get_by_address(account)
        if position is None or not position.is_open:
            raise NothingToWithdrawError()

        config = await self.get_config()
        available_at = position.opened_at + config.auto_withdraw_delay
        if self.now() < available_at:
            raise WithdrawNotReadyError()

        result = await self._settle(account, position, position.token_balance)

        if result.payout and await self.ledger.subscription_is_valid(account):
            result.reinvestment = await self._execute_buy(
                account, result.payout, reinvested=True
            )
        elif result.payout:
            await self.asset.transfer(self.address, account, result.payout)

        self.logger.info(
            "Auto-withdraw completed",
            extra={
                "caller": caller,
                "account": account,
                "payout": format_amount(result.payout),
                "reinvested": result.reinvestment is not None,
            },
        )
        return result

    async def _settle(
        self, account: str, position: Position, token_amount: int
    ) -> SellResult:
        """Remove tokens from the pool and distribute value; payout is left to the caller."""
        config = await self.get_config()
        now = self.now()

        reserve_token, reserve_base = await self.pool.reserves()
        current_value = value_of(token_amount, reserve_token, reserve_base)
        full_sell = token_amount == position.token_balance
        if full_sell:
            cost_basis = position.cost_basis
        else:
            cost_basis = mul_div(position.cost_basis, token_amount, position.token_balance)

        split = self._calculator(config).split_profit(
            current_value, cost_basis, config.user_share_bps
        )
        await self.pool.add_sell(self.address, token_amount, current_value)

        commissions = await self.commissions.distribute(
            source=account,
            user_profit=split.user_profit,
            protocol_cut=split.protocol_cut,
            ladder_bps=list(config.commission_ladder_bps),
            depth_by_tier=list(config.commission_depth_by_tier),
            now=now,
        )
        for recipient, amount in commissions.totals.items():
            await self.asset.transfer(self.address, recipient, amount)
        await self.commissions.record(account, commissions, now)

        reward = self._success_reward(config, split, commissions.remainder)
        if reward:
            await self.earning_repo.create(
                recipient=account,
                source=account,
                kind=EarningKind.SUCCESS_REWARD,
                amount=reward,
                timestamp=now,
            )
        protocol_share = commissions.remainder - reward
        config.pending_balance += protocol_share

        position.token_balance -= token_amount
        position.cost_basis -= cost_basis
        if full_sell:
            position.opened_at = None
            await self.deposit_repo.close_entries(account)
        await self.session.flush()

        result = SellResult(
            account=account,
            token_amount=token_amount,
            current_value=current_value,
            cost_basis=cost_basis,
            profit=split.profit,
            payout=split.payout + reward,
            commissions=commissions.totals,
            success_reward=reward,
            protocol_share=protocol_share,
        )
        self.logger.info(
            "Position settled",
            extra={
                "account": account,
                "token_amount": format_amount(token_amount),
                "current_value": format_amount(current_value),
                "cost_basis": format_amount(cost_basis),
                "profit": format_amount(split.profit),
                "payout": format_amount(result.payout),
                "commissions": format_amount(commissions.distributed),
                "success_reward": format_amount(reward),
            },
        )
        return result

    @staticmethod
    def _success_reward(
        config: TradingConfig, split: ProfitSplit, available: int
    ) -> int:
        if config.success_reward_bps <= 0 or split.profit <= 0:
            return 0
        if split.profit < config.success_reward_requirement:
            return 0
        reward = mul_div(split.profit, config.success_reward_bps, BPS_DENOMINATOR)
        return min(reward, available)

    # Protocol rewards

    async def withdraw_rewards(self, caller: str, amount: int) -> int:
        """
        Send part of the pending balance to the fee recipient.

        Raises:
            AuthorizationError: Caller is neither owner nor fee recipient
            InvalidAmountError: Amount not positive or above pending balance
        """
        caller = normalize_address(caller)
        config = await self.get_config()
        if caller not in (self.settings.owner_address, config.fee_to):
            raise AuthorizationError("Caller may not withdraw rewards")
        if amount <= 0 or amount > config.pending_balance:
            raise InvalidAmountError(
                f"Cannot withdraw {amount} of pending {config.pending_balance}"
            )

        config.pending_balance -= amount
        received = await self.asset.transfer(self.address, config.fee_to, amount)
        self.logger.info(
            "Protocol rewards withdrawn",
            extra={
                "fee_to": config.fee_to,
                "amount": format_amount(amount),
                "remaining": format_amount(config.pending_balance),
            },
        )
        return received

    async def withdraw_all(self, caller: str) -> int:
        config = await self.get_config()
        if config.pending_balance == 0:
            raise NothingToWithdrawError("No pending rewards")
        return await self.withdraw_rewards(caller, config.pending_balance)

    async def pending_rewards(self) -> int:
        return (await self.get_config()).pending_balance

    # Views

    async def magna_balance(self, address: str) -> int:
        """Tokens held by address in the engine."""
        position = await self.position_repo.get_by_address(normalize_address(address))
        return position.token_balance if position else 0

    async def deposit_history_length(self, address: str) -> int:
        """Deposit entries of the currently held position."""
        return await self.deposit_repo.count_open(normalize_address(address))

    async def cost_basis_of(self, address: str) -> int:
        position = await self.position_repo.get_by_address(normalize_address(address))
        return position.cost_basis if position else 0

    async def withdraw_available_at(self, address: str) -> int | None:
        """Timestamp from which auto-withdraw is allowed, None without a position."""
        position = await self.position_repo.get_by_address(normalize_address(address))
        if position is None or not position.is_open:
            return None
        config = await self.get_config()
        return position.opened_at + config.auto_withdraw_delay

    async def earnings_of(self, address: str, kind: str | None = None) -> int:
        return await self.earning_repo.total_for(normalize_address(address), kind)

    async def matured_accounts(self) -> list[str]:
        """Open positions whose maturity timer has elapsed."""
        config = await self.get_config()
        return await self.position_repo.find_matured(
            self.now() - config.auto_withdraw_delay
        )

    def _calculator(self, config: TradingConfig) -> CurveCalculator:
        return CurveCalculator(config.pricing_fee_bps, config.liquidity_fee_bps)
