"""
Subscription service.

Owns per-account subscription tier, registration time and the single
upward referral link. Links may only be rebound once the current upline's
subscription has lapsed; downlines follow the link automatically.
"""

from dataclasses import dataclass

from calculator import format_amount, mul_div
from app.config.business_constants import validate_shares
from app.models.account import Account
from app.models.ledger_config import LedgerConfig
from app.models.subscription_tier import SubscriptionTier
from app.repositories.account_repository import AccountRepository
from app.repositories.config_repository import LedgerConfigRepository
from app.repositories.nonce_repository import NonceRepository
from app.repositories.subscription_tier_repository import SubscriptionTierRepository
from app.services.asset_ledger_service import AssetLedgerService
from app.services.base_service import BaseService
from app.services.referral.chain_manager import ReferralChainManager
from app.services.referral.signature import UINT256_MAX, SignatureVerifier
from app.utils.exceptions import (
    ConfigurationError,
    InvalidSignatureError,
    InvalidTierError,
    NonceAlreadyUsedError,
    ReferralAlreadyBoundError,
    ReferralCycleError,
    ReferralNotSubscribedError,
    SelfReferralError,
)
from app.utils.validation import normalize_address


@dataclass
class AccountInfo:
    """Public view of an account record."""

    address: str
    registered_at: int
    subscription_level: int
    referral: str | None
    subscription_expires_at: int
    is_valid: bool


@dataclass
class TierInfo:
    """Public view of a tier."""

    index: int
    price: int
    duration_seconds: int
    max_cumulative_deposit: int


class SubscriptionService(BaseService):
    """Referral & subscription ledger."""

    def __init__(self, session, settings=None, clock=None) -> None:
        super().__init__(session, settings, clock)
        self.account_repo = AccountRepository(session)
        self.tier_repo = SubscriptionTierRepository(session)
        self.nonce_repo = NonceRepository(session)
        self.config_repo = LedgerConfigRepository(session)
        self.chain = ReferralChainManager(session, self.settings.max_referral_depth)
        self.asset = AssetLedgerService(session, self.settings, self.clock)
        self.address = self.settings.referral_ledger_address

    async def get_config(self) -> LedgerConfig:
        config = await self.config_repo.get_singleton()
        if config is None:
            raise ConfigurationError("Referral ledger is not initialized")
        return config

    # Subscribing

    async def subscribe(
        self, caller: str, referral: str, tier_index: int
    ) -> Account:
        """
        Buy a subscription tier under a referral.

        Args:
            caller: Subscribing account
            referral: Sponsoring upline
            tier_index: Index into the tier table

        Returns:
            Updated account record

        Raises:
            InvalidTierError: Tier index out of range
            ReferralNotSubscribedError: Referral has no valid subscription
            ReferralAlreadyBoundError: Caller is bound to another valid referral
            InsufficientAllowanceError: Payment allowance too low
        """
        caller = normalize_address(caller)
        referral = normalize_address(referral)

        tier = await self._get_tier(tier_index)
        account = await self._check_link(caller, referral)

        if tier.price > 0:
            await self._collect_payment(caller, tier.price)

        return await self._register(caller, referral, tier, account)

    async def subscribe_with_code(
        self,
        caller: str,
        referral: str,
        nonce: int,
        signature: bytes | str,
        verifier: SignatureVerifier,
    ) -> Account:
        """
        Subscribe using an off-chain issued code instead of paying.

        Raises:
            NonceAlreadyUsedError: Nonce consumed before, by any account
            InvalidSignatureError: Signature not from the trusted signer
        """
        caller = normalize_address(caller)
        referral = normalize_address(referral)

        if not 0 <= nonce <= UINT256_MAX:
            raise InvalidSignatureError(f"Nonce out of range: {nonce}")
        if await self.nonce_repo.is_used(nonce):
            self.logger.warning(
                "Subscription code replay rejected",
                extra={"caller": caller, "nonce": str(nonce)},
            )
            raise NonceAlreadyUsedError()
        if not verifier.verify(nonce, signature):
            raise InvalidSignatureError()

        config = await self.get_config()
        tier = await self._get_tier(config.code_tier)
        account = await self._check_link(caller, referral)

        await self.nonce_repo.mark_used(nonce, caller, self.now())
        return await self._register(caller, referral, tier, account)

    # Views

    async def subscription_is_valid(self, address: str) -> bool:
        account = await self.account_repo.get_by_address(normalize_address(address))
        return account is not None and account.is_valid_at(self.now())

    async def user_info(self, address: str) -> AccountInfo:
        address = normalize_address(address)
        account = await self.account_repo.get_by_address(address)
        if account is None:
            return AccountInfo(address, 0, 0, None, 0, False)
        return AccountInfo(
            address=address,
            registered_at=account.registered_at,
            subscription_level=account.subscription_level,
            referral=account.referral,
            subscription_expires_at=account.subscription_expires_at,
            is_valid=account.is_valid_at(self.now()),
        )

    async def get_recruitors(self, address: str) -> list[str]:
        return await self.chain.get_recruitors(normalize_address(address))

    async def users_by_referral(self, address: str) -> list[str]:
        return await self.chain.users_by_referral(normalize_address(address))

    async def list_tiers(self) -> list[TierInfo]:
        return [
            TierInfo(
                index=t.tier_index,
                price=t.price,
                duration_seconds=t.duration_seconds,
                max_cumulative_deposit=t.max_cumulative_deposit,
            )
            for t in await self.tier_repo.list_tiers()
        ]

    # Admin

    async def change_subscription(
        self,
        caller: str,
        tier_index: int,
        price: int,
        duration_seconds: int,
        max_cumulative_deposit: int,
    ) -> None:
        """
        Edit a tier, or append one at index == number of tiers.

        Existing accounts keep their recorded tier index and expiry.
        """
        self.require_owner(caller)
        if price < 0 or max_cumulative_deposit < 0 or duration_seconds <= 0:
            raise ConfigurationError("Tier values out of range")

        tiers = await self.tier_repo.list_tiers()
        if not 0 <= tier_index <= len(tiers):
            raise InvalidTierError()

        if tier_index == len(tiers):
            await self.tier_repo.create(
                tier_index=tier_index,
                price=price,
                duration_seconds=duration_seconds,
                max_cumulative_deposit=max_cumulative_deposit,
            )
        else:
            tier = tiers[tier_index]
            tier.price = price
            tier.duration_seconds = duration_seconds
            tier.max_cumulative_deposit = max_cumulative_deposit

        self.logger.info(
            "Subscription tier changed",
            extra={
                "tier_index": tier_index,
                "price": format_amount(price),
                "duration_seconds": duration_seconds,
                "max_cumulative_deposit": format_amount(max_cumulative_deposit),
            },
        )

    async def set_subscription_fee(
        self, caller: str, guarantee_share: int, treasury_share: int, denominator: int
    ) -> None:
        self.require_owner(caller)
        try:
            validate_shares(guarantee_share, treasury_share, denominator)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        config = await self.get_config()
        config.guarantee_share = guarantee_share
        config.treasury_share = treasury_share
        config.share_denominator = denominator

    async def set_code_tier(self, caller: str, tier_index: int) -> None:
        self.require_owner(caller)
        await self._get_tier(tier_index)
        config = await self.get_config()
        config.code_tier = tier_index

    # Internals

    async def _get_tier(self, tier_index: int) -> SubscriptionTier:
        tier = await self.tier_repo.get_by_index(tier_index) if tier_index >= 0 else None
        if tier is None:
            raise InvalidTierError(f"Tier index {tier_index} is out of range")
        return tier

    async def _link_target_is_valid(self, address: str) -> bool:
        if address == self.settings.root_referral_address:
            return True
        return await self.subscription_is_valid(address)

    async def _check_link(self, caller: str, referral: str) -> Account | None:
        if caller == referral:
            raise SelfReferralError()

        if not await self._link_target_is_valid(referral):
            self.logger.warning(
                "Referral has no valid subscription",
                extra={"caller": caller, "referral": referral},
            )
            raise ReferralNotSubscribedError()

        account = await self.account_repo.get_by_address(caller)
        if (
            account is not None
            and account.referral
            and account.referral != referral
            and await self._link_target_is_valid(account.referral)
        ):
            raise ReferralAlreadyBoundError(
                f"{caller} is bound to {account.referral} until its subscription lapses"
            )

        if await self.chain.would_create_cycle(caller, referral):
            raise ReferralCycleError(f"{referral} is a downline of {caller}")

        return account

    async def _collect_payment(self, caller: str, price: int) -> None:
        """Pull the price into the ledger and route guarantee/treasury/owner shares."""
        received = await self.asset.transfer_from(self.address, caller, self.address, price)

        config = await self.get_config()
        asset_config = await self.asset.get_config()
        guarantee = mul_div(received, config.guarantee_share, config.share_denominator)
        treasury = mul_div(received, config.treasury_share, config.share_denominator)
        rest = received - guarantee - treasury

        for to, amount in (
            (asset_config.guarantee_addr, guarantee),
            (asset_config.treasury_addr, treasury),
            (self.settings.owner_address, rest),
        ):
            if amount:
                await self.asset.transfer(self.address, to, amount)

        self.logger.info(
            "Subscription payment collected",
            extra={
                "caller": caller,
                "price": format_amount(price),
                "guarantee": format_amount(guarantee),
                "treasury": format_amount(treasury),
                "owner": format_amount(rest),
            },
        )

    async def _register(
        self,
        caller: str,
        referral: str,
        tier: SubscriptionTier,
        account: Account | None,
    ) -> Account:
        now = self.now()
        expires_at = now + tier.duration_seconds

        if account is None:
            account = await self.account_repo.create(
                address=caller,
                referral=referral,
                subscription_level=tier.tier_index,
                registered_at=now,
                subscription_expires_at=expires_at,
            )
            self.logger.info(
                "Account subscribed",
                extra={"address": caller, "referral": referral, "tier": tier.tier_index},
            )
            return account

        previous = account.referral
        account.referral = referral
        account.subscription_level = tier.tier_index
        account.registered_at = now
        account.subscription_expires_at = expires_at
        await self.session.flush()

        self.logger.info(
            "Subscription renewed" if previous == referral else "Referral rebound",
            extra={
                "address": caller,
                "previous_referral": previous,
                "referral": referral,
                "tier": tier.tier_index,
                "expires_at": expires_at,
            },
        )
        return account
