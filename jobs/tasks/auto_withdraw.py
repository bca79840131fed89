"""
Auto-withdraw task.

Closes positions whose maturity timer has elapsed. Payouts are
reinvested for subscribed accounts and transferred out otherwise.
Runs periodically; one failing account does not stop the sweep.
"""

import asyncio
from dataclasses import dataclass, field

import dramatiq
from loguru import logger

from calculator import format_amount
from app.config.settings import settings
from app.services.protocol import TokenSaleProtocol
from app.utils.exceptions import ProtocolError
from app.utils.redis_utils import get_redis_client, task_lock
from jobs.utils.database import create_task_engine, create_task_session_maker


@dataclass
class SweepResult:
    """Outcome of one sweep."""

    processed: list[str] = field(default_factory=list)
    reinvested: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    paid_out: int = 0


@dramatiq.actor(max_retries=0, time_limit=600_000)  # 10 min
def sweep_auto_withdrawals(caller: str | None = None) -> None:
    """
    Auto-withdraw every matured position.

    Args:
        caller: Address recorded as the caller (owner by default)
    """
    logger.info("Starting auto-withdraw sweep...")

    try:
        result = asyncio.run(_sweep_async(caller))
        if result is None:
            logger.info("Auto-withdraw sweep skipped: another sweep is running")
            return

        logger.info(
            f"Auto-withdraw sweep complete: {len(result.processed)} processed, "
            f"{len(result.reinvested)} reinvested, {len(result.failed)} failed, "
            f"paid out {format_amount(result.paid_out)}"
        )
    except Exception as e:
        logger.exception(f"Auto-withdraw sweep failed: {e}")


async def _sweep_async(caller: str | None) -> SweepResult | None:
    """Run a sweep under the distributed task lock."""
    redis_client = get_redis_client()
    engine = create_task_engine()
    try:
        async with task_lock(redis_client, "auto_withdraw_sweep", timeout=600) as acquired:
            if not acquired:
                return None
            protocol = TokenSaleProtocol(create_task_session_maker(engine))
            return await run_auto_withdraw_sweep(protocol, caller)
    finally:
        await engine.dispose()
        await redis_client.aclose()


async def run_auto_withdraw_sweep(
    protocol: TokenSaleProtocol, caller: str | None = None
) -> SweepResult:
    """
    Auto-withdraw all matured accounts.

    Each account is its own transaction; protocol errors are logged
    and the sweep continues with the next account.

    Args:
        protocol: Protocol facade
        caller: Address recorded as the caller (owner by default)

    Returns:
        SweepResult
    """
    caller = caller or settings.owner_address
    result = SweepResult()

    accounts = await protocol.matured_accounts()
    if not accounts:
        logger.info("No matured positions found")
        return result

    for account in accounts:
        try:
            outcome = await protocol.auto_withdraw(caller, account)
        except ProtocolError as e:
            logger.warning(
                f"Auto-withdraw failed for {account}: {e}",
                extra={"account": account, "error_code": e.code},
            )
            result.failed[account] = e.code
            continue

        result.processed.append(account)
        if outcome.reinvestment is not None:
            result.reinvested.append(account)
        else:
            result.paid_out += outcome.payout

    return result
