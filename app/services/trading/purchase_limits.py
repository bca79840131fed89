"""
Purchase limit module.

Sliding-window cap on cumulative purchases per account. An entry stops
counting once it is `purchase_cooldown` seconds old.
"""

from app.models.trading_config import TradingConfig
from app.repositories.account_repository import AccountRepository
from app.repositories.deposit_repository import DepositRepository
from app.repositories.subscription_tier_repository import SubscriptionTierRepository
from app.utils.validation import normalize_address


class PurchaseLimitMixin:
    """Mixin providing rolling purchase limits."""

    account_repo: AccountRepository
    tier_repo: SubscriptionTierRepository
    deposit_repo: DepositRepository

    async def purchase_cap(self, address: str, config: TradingConfig) -> int:
        """
        Cap for the account's tier.

        The tier table is re-read on every call, so editing a tier
        changes the cap of accounts already on it.
        """
        cap = config.max_purchase
        account = await self.account_repo.get_by_address(address)
        if account is not None:
            tier = await self.tier_repo.get_by_index(account.subscription_level)
            if tier is not None:
                cap = min(cap, tier.max_cumulative_deposit)
        return cap

    async def window_usage(self, address: str, config: TradingConfig) -> int:
        """Base bought inside the current window."""
        since = self.now() - config.purchase_cooldown
        return sum(await self.deposit_repo.get_window_amounts(address, since))

    async def get_purchase_limit(self, address: str) -> int:
        """
        Remaining purchase allowance for the active window.

        Args:
            address: Account address

        Returns:
            cap - purchases in window, floored at zero
        """
        address = normalize_address(address)
        config = await self.get_config()
        cap = await self.purchase_cap(address, config)
        used = await self.window_usage(address, config)
        return max(cap - used, 0)
