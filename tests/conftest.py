"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path
from types import SimpleNamespace

# Minimal environment for tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("LOG_FILE", "")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import dramatiq
import pytest
import pytest_asyncio
from dramatiq.brokers.stub import StubBroker
from eth_account import Account as EthAccount
from unittest.mock import AsyncMock, MagicMock

# Actors bind to the stub broker instead of Redis
dramatiq.set_broker(StubBroker())

from calculator import PRECISION
from app.config.database import create_engine, create_session_maker, init_db
from app.config.settings import Settings
from app.services.protocol import TokenSaleProtocol

START_TIME = 1_700_000_000

# Ordinary accounts; contract and protocol addresses come from Settings
ADDRESSES = {
    "alice": "0x00000000000000000000000000000000000000b1",
    "bob": "0x00000000000000000000000000000000000000b2",
    "carol": "0x00000000000000000000000000000000000000b3",
    "dave": "0x00000000000000000000000000000000000000b4",
    "erin": "0x00000000000000000000000000000000000000b5",
    "frank": "0x00000000000000000000000000000000000000b6",
    "stranger": "0x00000000000000000000000000000000000000b7",
}

STARTING_BALANCE = 10_000 * PRECISION


class FakeClock:
    """Controllable unix-seconds clock."""

    def __init__(self, start: int = START_TIME) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def signer():
    """Trusted issuer of subscription codes."""
    return EthAccount.create()


@pytest.fixture
def test_settings(signer) -> Settings:
    """Settings bound to an in-memory database and the test signer."""
    return Settings(
        database_url="sqlite+aiosqlite://",
        log_file=None,
        trusted_signer_address=signer.address,
    )


@pytest.fixture
def users(test_settings) -> SimpleNamespace:
    """Named addresses used across integration tests."""
    return SimpleNamespace(
        owner=test_settings.owner_address,
        root=test_settings.root_referral_address,
        fee_to=test_settings.fee_to_address,
        guarantee=test_settings.guarantee_address,
        treasury=test_settings.treasury_address,
        engine=test_settings.trading_engine_address,
        pool=test_settings.pool_address,
        ledger=test_settings.referral_ledger_address,
        **ADDRESSES,
    )


@pytest_asyncio.fixture
async def engine():
    """In-memory database with all tables created."""
    engine = create_engine("sqlite+aiosqlite://", echo=False)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def protocol(engine, test_settings, clock) -> TokenSaleProtocol:
    """Bootstrapped protocol on a fresh database."""
    protocol = TokenSaleProtocol(
        create_session_maker(engine), settings=test_settings, clock=clock
    )
    await protocol.bootstrap()
    return protocol


@pytest.fixture
def fund(protocol, users):
    """
    Mint base asset to an account and approve the ledger and engine.

    Usage:
        await fund(users.alice)
    """

    async def _fund(address: str, amount: int = STARTING_BALANCE) -> None:
        await protocol.asset_mint(users.owner, address, amount)
        await protocol.asset_approve(address, users.ledger, amount)
        await protocol.asset_approve(address, users.engine, amount)

    return _fund


@pytest.fixture
def member(protocol, fund, users):
    """
    Fund an account and subscribe it.

    Usage:
        await member(users.alice)                 # tier 0 under root
        await member(users.bob, users.alice, 2)   # tier 2 under alice
    """

    async def _member(address: str, referral: str | None = None, tier: int = 0):
        await fund(address)
        return await protocol.subscribe(address, referral or users.root, tier)

    return _member
