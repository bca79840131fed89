"""
Trading admin module.

Owner-gated configuration setters. Each setter validates the resulting
configuration as a whole before applying it.
"""

from typing import Any

from app.config.business_constants import BPS_DENOMINATOR, validate_profit_distribution
from app.models.trading_config import TradingConfig
from app.utils.exceptions import ConfigurationError
from app.utils.validation import is_zero_address, normalize_address


class TradingAdminMixin:
    """Mixin providing admin setters."""

    async def _update_config(self, caller: str, **values: Any) -> TradingConfig:
        self.require_owner(caller)
        config = await self.get_config()

        ladder = values.get("commission_ladder_bps", config.commission_ladder_bps)
        user_share = values.get("user_share_bps", config.user_share_bps)
        try:
            validate_profit_distribution(list(ladder), user_share)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        for key, value in values.items():
            setattr(config, key, value)
        await self.session.flush()

        self.logger.info(
            "Trading config updated",
            extra={key: str(value) for key, value in values.items()},
        )
        return config

    @staticmethod
    def _check_bps(*values: int) -> None:
        if any(not 0 <= v <= BPS_DENOMINATOR for v in values):
            raise ConfigurationError(f"Rates must be within 0..{BPS_DENOMINATOR}")

    async def set_fee(
        self, caller: str, pricing_fee_bps: int, liquidity_fee_bps: int
    ) -> None:
        """Set buy pricing fee and pool credit fee."""
        self._check_bps(pricing_fee_bps, liquidity_fee_bps)
        await self._update_config(
            caller,
            pricing_fee_bps=pricing_fee_bps,
            liquidity_fee_bps=liquidity_fee_bps,
        )

    async def set_withdraw_profit_fee(self, caller: str, fee_bps: int) -> None:
        """Set the protocol's share of realized profit (account keeps the rest)."""
        self._check_bps(fee_bps)
        await self._update_config(caller, user_share_bps=BPS_DENOMINATOR - fee_bps)

    async def set_withdraw_profit_distribution(
        self, caller: str, ladder_bps: list[int]
    ) -> None:
        """Set commission ladder by eligibility rank."""
        await self._update_config(caller, commission_ladder_bps=list(ladder_bps))

    async def set_commission_depth_policy(
        self, caller: str, depth_by_tier: list[int]
    ) -> None:
        """Set the deepest eligible raw depth for each tier."""
        if any(d < 0 for d in depth_by_tier):
            raise ConfigurationError("Depths must be non-negative")
        await self._update_config(caller, commission_depth_by_tier=list(depth_by_tier))

    async def set_success_reward(self, caller: str, reward_bps: int) -> None:
        self._check_bps(reward_bps)
        await self._update_config(caller, success_reward_bps=reward_bps)

    async def set_success_reward_requirement(self, caller: str, min_profit: int) -> None:
        if min_profit < 0:
            raise ConfigurationError("Requirement must be non-negative")
        await self._update_config(caller, success_reward_requirement=min_profit)

    async def set_purchase_cooldown(self, caller: str, seconds: int) -> None:
        if seconds <= 0:
            raise ConfigurationError("Cooldown must be positive")
        await self._update_config(caller, purchase_cooldown=seconds)

    async def set_max_purchase(self, caller: str, amount: int) -> None:
        if amount < 0:
            raise ConfigurationError("Max purchase must be non-negative")
        await self._update_config(caller, max_purchase=amount)

    async def set_max_amount_per_buy(self, caller: str, amount: int) -> None:
        if amount <= 0:
            raise ConfigurationError("Max amount per buy must be positive")
        await self._update_config(caller, max_amount_per_buy=amount)

    async def set_auto_withdraw_delay(self, caller: str, seconds: int) -> None:
        if seconds < 0:
            raise ConfigurationError("Delay must be non-negative")
        await self._update_config(caller, auto_withdraw_delay=seconds)

    async def set_fee_to(self, caller: str, fee_to: str) -> None:
        if is_zero_address(fee_to):
            raise ConfigurationError("Fee recipient cannot be the zero address")
        await self._update_config(caller, fee_to=normalize_address(fee_to))
