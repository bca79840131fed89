"""
Liquidity pool service.

Holds the (token, base) reserve pair that prices the token. Only the
single configured trader may mutate reserves; rebinding the trader is
an owner-gated admin call.
"""

from calculator import format_amount, spot_price
from app.models.pool_state import PoolState
from app.repositories.config_repository import PoolStateRepository
from app.services.base_service import BaseService
from app.utils.exceptions import (
    ConfigurationError,
    EmptyPoolError,
    InsufficientReserveError,
    InvalidAmountError,
    NotTraderError,
)
from app.utils.validation import normalize_address


class LiquidityPoolService(BaseService):
    """Bonding-curve reserve pair."""

    def __init__(self, session, settings=None, clock=None) -> None:
        super().__init__(session, settings, clock)
        self.state_repo = PoolStateRepository(session)

    async def get_state(self) -> PoolState:
        state = await self.state_repo.get_singleton()
        if state is None:
            raise ConfigurationError("Liquidity pool is not initialized")
        return state

    async def reserves(self) -> tuple[int, int]:
        """
        Current reserves.

        Returns:
            Tuple of (reserve_token, reserve_base)
        """
        state = await self.get_state()
        return state.reserve_token, state.reserve_base

    async def current_price(self) -> int:
        """
        Base per token scaled by 10**18, rounded down.

        Raises:
            EmptyPoolError: Before the first buy
        """
        reserve_token, reserve_base = await self.reserves()
        if reserve_token == 0:
            raise EmptyPoolError()
        return spot_price(reserve_token, reserve_base)

    async def add_buy(self, caller: str, token_in: int, base_in: int) -> None:
        """Increase both reserves (trader only)."""
        state = await self._require_trader(caller)
        if token_in < 0 or base_in < 0:
            raise InvalidAmountError()
        state.reserve_token += token_in
        state.reserve_base += base_in
        await self.session.flush()

    async def add_sell(self, caller: str, token_out: int, base_out: int) -> None:
        """
        Decrease both reserves (trader only).

        Raises:
            InsufficientReserveError: If either reserve would go negative
        """
        state = await self._require_trader(caller)
        if token_out < 0 or base_out < 0:
            raise InvalidAmountError()
        if token_out > state.reserve_token or base_out > state.reserve_base:
            self.logger.warning(
                "Sell exceeds reserves",
                extra={
                    "token_out": format_amount(token_out),
                    "base_out": format_amount(base_out),
                    "reserve_token": format_amount(state.reserve_token),
                    "reserve_base": format_amount(state.reserve_base),
                },
            )
            raise InsufficientReserveError()
        state.reserve_token -= token_out
        state.reserve_base -= base_out
        await self.session.flush()

    async def set_trader(self, caller: str, trader: str) -> None:
        """Rebind the authorized trader (owner only)."""
        self.require_owner(caller)
        state = await self.get_state()
        previous = state.trader
        state.trader = normalize_address(trader)
        self.logger.info(
            "Pool trader changed",
            extra={"previous": previous, "trader": state.trader},
        )

    async def _require_trader(self, caller: str) -> PoolState:
        state = await self.get_state()
        if normalize_address(caller) != state.trader:
            raise NotTraderError()
        return state
