"""
Asset ledger service.

In-process implementation of the fee-on-transfer base asset: balances,
allowances, a whitelist and the guard against transfers into
unregistered contracts. It lives in the same database as the protocol so
every transfer joins the caller's transaction.
"""

from calculator import format_amount, mul_div
from app.config.business_constants import validate_shares
from app.models.asset_ledger import AssetLedgerConfig
from app.repositories.asset_repository import (
    AssetAllowanceRepository,
    AssetBalanceRepository,
    AssetRegistryRepository,
)
from app.repositories.config_repository import AssetLedgerConfigRepository
from app.services.base_service import BaseService
from app.utils.exceptions import (
    ConfigurationError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidAmountError,
    UnregisteredContractError,
    WhitelistAlreadyAddedError,
    WhitelistAlreadyRemovedError,
)
from app.utils.validation import normalize_address


class AssetLedgerService(BaseService):
    """Fee-on-transfer asset ledger."""

    def __init__(self, session, settings=None, clock=None) -> None:
        super().__init__(session, settings, clock)
        self.balances = AssetBalanceRepository(session)
        self.allowances = AssetAllowanceRepository(session)
        self.registry = AssetRegistryRepository(session)
        self.config_repo = AssetLedgerConfigRepository(session)

    async def get_config(self) -> AssetLedgerConfig:
        config = await self.config_repo.get_singleton()
        if config is None:
            raise ConfigurationError("Asset ledger is not initialized")
        return config

    # Views

    async def balance_of(self, address: str) -> int:
        return await self.balances.balance_of(normalize_address(address))

    async def allowance(self, owner: str, spender: str) -> int:
        return await self.allowances.allowance(
            normalize_address(owner), normalize_address(spender)
        )

    async def is_whitelisted(self, address: str) -> bool:
        return await self.registry.is_whitelisted(normalize_address(address))

    # Transfers

    async def transfer(self, sender: str, to: str, amount: int) -> int:
        """
        Move amount from sender to `to`, charging the transfer fee.

        Args:
            sender: Paying address
            to: Receiving address
            amount: Gross amount debited from sender

        Returns:
            Net amount credited to `to`

        Raises:
            UnregisteredContractError: Destination is a non-whitelisted contract
            InsufficientBalanceError: Sender balance too low
        """
        sender = normalize_address(sender)
        to = normalize_address(to)
        if amount < 0:
            raise InvalidAmountError()

        to_whitelisted = await self.registry.is_whitelisted(to)
        if await self.registry.is_contract(to) and not to_whitelisted:
            self.logger.warning(
                "Transfer into unregistered contract rejected",
                extra={"sender": sender, "to": to},
            )
            raise UnregisteredContractError()

        sender_row = await self.balances.get_or_create(sender)
        if sender_row.balance < amount:
            raise InsufficientBalanceError()

        config = await self.get_config()
        exempt = config.whitelist_fee_exempt and (
            to_whitelisted or await self.registry.is_whitelisted(sender)
        )
        guarantee_fee = treasury_fee = 0
        if not exempt:
            guarantee_fee = mul_div(amount, config.guarantee_fee, config.fee_denominator)
            treasury_fee = mul_div(amount, config.treasury_fee, config.fee_denominator)
        received = amount - guarantee_fee - treasury_fee

        sender_row.balance -= amount
        await self._credit(to, received)
        if guarantee_fee:
            await self._credit(config.guarantee_addr, guarantee_fee)
        if treasury_fee:
            await self._credit(config.treasury_addr, treasury_fee)
        await self.session.flush()

        self.logger.debug(
            "Asset transfer",
            extra={
                "sender": sender,
                "to": to,
                "amount": format_amount(amount),
                "received": format_amount(received),
                "fee_exempt": exempt,
            },
        )
        return received

    async def approve(self, owner: str, spender: str, amount: int) -> None:
        """Set the amount spender may pull from owner."""
        if amount < 0:
            raise InvalidAmountError()
        await self.allowances.set_allowance(
            normalize_address(owner), normalize_address(spender), amount
        )

    async def transfer_from(
        self, spender: str, owner: str, to: str, amount: int
    ) -> int:
        """
        Pull amount from owner using spender's allowance.

        Raises:
            InsufficientAllowanceError: Allowance lower than amount
        """
        owner = normalize_address(owner)
        spender = normalize_address(spender)
        granted = await self.allowances.allowance(owner, spender)
        if granted < amount:
            self.logger.warning(
                "Insufficient allowance",
                extra={
                    "owner": owner,
                    "spender": spender,
                    "allowance": format_amount(granted),
                    "amount": format_amount(amount),
                },
            )
            raise InsufficientAllowanceError()
        await self.allowances.set_allowance(owner, spender, granted - amount)
        return await self.transfer(owner, to, amount)

    async def mint(self, caller: str, to: str, amount: int) -> None:
        """Create supply (owner only)."""
        self.require_owner(caller)
        if amount <= 0:
            raise InvalidAmountError()
        await self._credit(normalize_address(to), amount)
        await self.session.flush()

    # Whitelist and contracts

    async def add_whitelist(self, caller: str, address: str) -> None:
        self.require_owner(caller)
        address = normalize_address(address)
        if await self.registry.is_whitelisted(address):
            raise WhitelistAlreadyAddedError()
        await self.registry.add_whitelist(address)
        self.logger.info("Whitelist added", extra={"address": address})

    async def remove_whitelist(self, caller: str, address: str) -> None:
        self.require_owner(caller)
        address = normalize_address(address)
        if not await self.registry.is_whitelisted(address):
            raise WhitelistAlreadyRemovedError()
        await self.registry.remove_whitelist(address)
        self.logger.info("Whitelist removed", extra={"address": address})

    async def register_contract(self, caller: str, address: str) -> None:
        """Mark address as a contract (owner only)."""
        self.require_owner(caller)
        address = normalize_address(address)
        await self.registry.register_contract(address)
        self.logger.info("Contract registered", extra={"address": address})

    # Fee configuration

    async def set_fee(
        self, caller: str, guarantee_fee: int, treasury_fee: int, denominator: int
    ) -> None:
        self.require_owner(caller)
        try:
            validate_shares(guarantee_fee, treasury_fee, denominator)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        config = await self.get_config()
        config.guarantee_fee = guarantee_fee
        config.treasury_fee = treasury_fee
        config.fee_denominator = denominator
        self.logger.info(
            "Asset fee updated",
            extra={
                "guarantee_fee": guarantee_fee,
                "treasury_fee": treasury_fee,
                "denominator": denominator,
            },
        )

    async def set_guarantee_addr(self, caller: str, address: str) -> None:
        self.require_owner(caller)
        config = await self.get_config()
        config.guarantee_addr = normalize_address(address)

    async def set_treasury_addr(self, caller: str, address: str) -> None:
        self.require_owner(caller)
        config = await self.get_config()
        config.treasury_addr = normalize_address(address)

    async def _credit(self, address: str, amount: int) -> None:
        row = await self.balances.get_or_create(address)
        row.balance += amount
