"""
Exception handling utilities.

Defines categorized exception types for the token-sale protocol.
Every precondition failure is raised as a named error so the enclosing
transaction is rolled back and the caller sees a stable error code.
"""


class ProtocolError(Exception):
    """Base error for all protocol-level failures."""

    code = "protocol_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__doc__)


class SecurityError(ProtocolError):
    """Raised when a security-critical operation fails."""

    code = "security_error"


class ConfigurationError(ProtocolError):
    """Configuration values are internally inconsistent."""

    code = "configuration_error"


# Authorization

class AuthorizationError(ProtocolError):
    """Caller is not authorized for this operation."""

    code = "unauthorized"


class NotOwnerError(AuthorizationError):
    """Ownable: caller is not the owner"""

    code = "not_owner"


# Referral & subscription ledger

class LedgerError(ProtocolError):
    """Referral ledger failure."""

    code = "ledger_error"


class InvalidTierError(LedgerError):
    """Subscription tier index is out of range."""

    code = "invalid_tier"


class ReferralNotSubscribedError(LedgerError):
    """Referral has no valid subscription."""

    code = "referral_not_subscribed"


class ReferralAlreadyBoundError(LedgerError):
    """Account is already bound to a different valid referral."""

    code = "referral_already_bound"


class SelfReferralError(LedgerError):
    """Account cannot refer itself."""

    code = "self_referral"


class ReferralCycleError(LedgerError):
    """Referral link would create (or walked into) a cycle."""

    code = "referral_cycle"


class NonceAlreadyUsedError(LedgerError):
    """Subscription code nonce was already consumed."""

    code = "nonce_already_used"


class InvalidSignatureError(SecurityError):
    """Subscription code signature does not verify."""

    code = "invalid_signature"


# Liquidity pool

class PoolError(ProtocolError):
    """Liquidity pool failure."""

    code = "pool_error"


class EmptyPoolError(PoolError):
    """Pool has no token reserve yet."""

    code = "empty_pool"


class InsufficientReserveError(PoolError):
    """Sell would drive a reserve negative."""

    code = "insufficient_reserve"


class NotTraderError(PoolError, AuthorizationError):
    """Pool: caller is not the trader"""

    code = "not_trader"


# Trading engine

class TradingError(ProtocolError):
    """Trading engine failure."""

    code = "trading_error"


class InvalidAmountError(TradingError):
    """Amount must be positive."""

    code = "invalid_amount"


class SubscriptionRequiredError(TradingError):
    """Caller has no valid subscription."""

    code = "subscription_required"


class PurchaseLimitExceededError(TradingError):
    """Amount exceeds the remaining purchase limit."""

    code = "purchase_limit_exceeded"


class InsufficientTokenBalanceError(TradingError):
    """Token balance is lower than the sell amount."""

    code = "insufficient_token_balance"


class NothingToWithdrawError(TradingError):
    """Account has no open position."""

    code = "nothing_to_withdraw"


class WithdrawNotReadyError(TradingError):
    """cannot withdraw yet"""

    code = "withdraw_not_ready"


# External asset ledger

class AssetLedgerError(ProtocolError):
    """Asset ledger failure."""

    code = "asset_ledger_error"


class UnregisteredContractError(AssetLedgerError):
    """ERC20: transfer from the unregistered contract"""

    code = "unregistered_contract"


class InsufficientBalanceError(AssetLedgerError):
    """ERC20: transfer amount exceeds balance"""

    code = "insufficient_balance"


class InsufficientAllowanceError(AssetLedgerError):
    """ERC20: insufficient allowance"""

    code = "insufficient_allowance"


class WhitelistAlreadyAddedError(AssetLedgerError):
    """Whitelist: already added"""

    code = "whitelist_already_added"


class WhitelistAlreadyRemovedError(AssetLedgerError):
    """Whitelist: already removed"""

    code = "whitelist_already_removed"


# Exception categories based on handling strategy

# Caller errors - rejected precondition, state untouched
CALLER_ERRORS = (
    LedgerError,
    PoolError,
    TradingError,
    AuthorizationError,
    AssetLedgerError,
)

# Must raise - critical security or configuration issues
MUST_RAISE = (
    SecurityError,
    ConfigurationError,
)


def is_caller_error(exc: Exception) -> bool:
    """
    Check if exception is a rejected precondition.

    Args:
        exc: Exception to check

    Returns:
        True if the caller may fix the input and retry
    """
    return isinstance(exc, CALLER_ERRORS) and not isinstance(exc, MUST_RAISE)
