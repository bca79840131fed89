"""Unit tests for validation utilities, settings and error codes."""

import pytest
from pydantic import ValidationError

from app.config.business_constants import (
    SUBSCRIPTION_TIERS,
    validate_profit_distribution,
    validate_shares,
)
from app.config.settings import Settings
from app.utils.exceptions import (
    ConfigurationError,
    InvalidSignatureError,
    NotOwnerError,
    NotTraderError,
    PurchaseLimitExceededError,
    WithdrawNotReadyError,
    is_caller_error,
)
from app.utils.validation import (
    ZERO_ADDRESS,
    is_zero_address,
    normalize_address,
    validate_address,
)
from calculator import PRECISION


class TestAddressValidation:
    """Tests for address validation."""

    def test_empty_address_invalid(self):
        """Empty address should be invalid."""
        assert validate_address("") == (False, "Address is empty")

    def test_short_address_invalid(self):
        """Short address should be invalid."""
        is_valid, _ = validate_address("0x1234")
        assert not is_valid

    def test_no_0x_prefix_invalid(self):
        """Address without 0x prefix should be invalid."""
        is_valid, error = validate_address("1" * 40)
        assert not is_valid
        assert "0x" in error

    def test_invalid_hex_characters(self):
        """Address with non-hex characters should be invalid."""
        is_valid, _ = validate_address("0x" + "z" * 40)
        assert not is_valid

    @pytest.mark.parametrize(
        "address",
        [
            "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0",
            "0x0000000000000000000000000000000000000000",
            "0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF",
        ],
    )
    def test_valid_addresses(self, address):
        """Various valid address formats should pass."""
        assert validate_address(address) == (True, None)

    def test_normalize_lowercases(self):
        assert normalize_address(" 0xABCDEF0000000000000000000000000000000001 ") == (
            "0xabcdef0000000000000000000000000000000001"
        )

    def test_normalize_rejects_invalid(self):
        with pytest.raises(ValueError):
            normalize_address("not-an-address")

    def test_zero_address(self):
        assert is_zero_address(ZERO_ADDRESS)
        assert is_zero_address(None)
        assert not is_zero_address("0x00000000000000000000000000000000000000b1")


class TestBusinessConstants:
    """Tests for default economics."""

    def test_tier_prices(self):
        """Tiers 0..2 cost 150, 550 and 970."""
        assert [tier.price for tier in SUBSCRIPTION_TIERS] == [
            150 * PRECISION,
            550 * PRECISION,
            970 * PRECISION,
        ]

    def test_shares_must_fit_denominator(self):
        validate_shares(500, 500, 1_000)
        with pytest.raises(ValueError):
            validate_shares(600, 500, 1_000)
        with pytest.raises(ValueError):
            validate_shares(1, 1, 0)

    def test_default_distribution_is_valid(self):
        validate_profit_distribution([600, 300, 200], 6_500)

    @pytest.mark.parametrize(
        "ladder",
        [[6_000, 5_000], [3_000, 3_000], [5_385], [-1]],
    )
    def test_distribution_over_protocol_cut_rejected(self, ladder):
        """Ladder paid from 65% of profit must fit inside the remaining 35%."""
        with pytest.raises(ValueError):
            validate_profit_distribution(ladder, 6_500)

    def test_distribution_at_boundary(self):
        validate_profit_distribution([5_384], 6_500)


class TestSettings:
    """Tests for settings validation."""

    def test_addresses_normalized(self):
        settings = Settings(owner_address="0xABCDEF0000000000000000000000000000000001")
        assert settings.owner_address == "0xabcdef0000000000000000000000000000000001"

    def test_invalid_address_rejected(self):
        with pytest.raises(ValidationError):
            Settings(owner_address="owner")

    def test_sync_database_url_rejected(self):
        with pytest.raises(ValidationError):
            Settings(database_url="sqlite:///magna.db")

    def test_inconsistent_subscription_split_rejected(self):
        with pytest.raises(ValidationError):
            Settings(subscription_guarantee_share=600, subscription_treasury_share=600)

    def test_ladder_exceeding_protocol_cut_rejected(self):
        with pytest.raises(ValidationError):
            Settings(commission_ladder_bps=[3_000, 3_000])

    def test_debug_in_production_rejected(self):
        with pytest.raises(ValidationError):
            Settings(environment="production", debug=True)


class TestExceptions:
    """Tests for error categories and messages."""

    def test_default_messages(self):
        assert str(NotOwnerError()) == "Ownable: caller is not the owner"
        assert str(WithdrawNotReadyError()) == "cannot withdraw yet"
        assert PurchaseLimitExceededError().code == "purchase_limit_exceeded"

    def test_custom_message(self):
        assert str(ConfigurationError("bad ladder")) == "bad ladder"

    def test_categories(self):
        assert is_caller_error(PurchaseLimitExceededError())
        assert is_caller_error(NotTraderError())
        assert not is_caller_error(ConfigurationError())
        assert not is_caller_error(InvalidSignatureError())
        assert not is_caller_error(ValueError())
