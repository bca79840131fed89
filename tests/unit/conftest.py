"""
Shared fixtures for unit tests.

This module provides common fixtures used across multiple test modules:
- CurveCalculator instance with default fees
- Account factory for eligibility checks
"""

import pytest

from calculator import CurveCalculator
from app.models.account import Account

NOW = 1_700_000_000


@pytest.fixture
def calculator() -> CurveCalculator:
    """
    Create CurveCalculator with the default 2.5% / 0.5% fees.

    Returns:
        CurveCalculator: Calculator instance for testing
    """
    return CurveCalculator()


@pytest.fixture
def make_account():
    """
    Build detached Account rows.

    Default values:
    - tier: 0
    - subscription valid for another day

    Returns:
        Callable creating Account objects
    """

    def _make(tier: int = 0, expires_in: int = 86_400, referral: str | None = None) -> Account:
        return Account(
            address="0x00000000000000000000000000000000000000b1",
            referral=referral,
            subscription_level=tier,
            registered_at=NOW - 1,
            subscription_expires_at=NOW + expires_in,
        )

    return _make
