"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.config import business_constants as bc
from app.utils.validation import normalize_address


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./magna.db"
    database_echo: bool = False

    # Redis (for Dramatiq)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Application
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str | None = "logs/magna.log"

    # Protocol roles
    owner_address: str = "0x00000000000000000000000000000000000000a1"
    root_referral_address: str = "0x00000000000000000000000000000000000000a2"
    fee_to_address: str = "0x00000000000000000000000000000000000000a3"
    guarantee_address: str = "0x426de8f8ad29029cfcee1b920751417d69a84000"
    treasury_address: str = "0xcb7359b8adde4e2bbf5ed4716b9360b315be8f39"
    trusted_signer_address: str = "0x00000000000000000000000000000000000000a4"

    # Protocol contracts
    trading_engine_address: str = "0x00000000000000000000000000000000000000c1"
    pool_address: str = "0x00000000000000000000000000000000000000c2"
    referral_ledger_address: str = "0x00000000000000000000000000000000000000c3"

    # Buy path
    pricing_fee_bps: int = Field(default=bc.PRICING_FEE_BPS, ge=0, le=bc.BPS_DENOMINATOR)
    liquidity_fee_bps: int = Field(default=bc.LIQUIDITY_FEE_BPS, ge=0, le=bc.BPS_DENOMINATOR)
    max_amount_per_buy: int = Field(default=bc.MAX_AMOUNT_PER_BUY, gt=0)
    max_purchase: int = Field(default=bc.MAX_PURCHASE, ge=0)
    purchase_cooldown: int = Field(
        default=bc.PURCHASE_COOLDOWN_SECONDS, gt=0,
        description="Rolling purchase window in seconds"
    )

    # Sell path
    user_share_bps: int = Field(default=bc.USER_SHARE_BPS, ge=0, le=bc.BPS_DENOMINATOR)
    commission_ladder_bps: list[int] = Field(
        default_factory=lambda: list(bc.COMMISSION_LADDER_BPS)
    )
    commission_depth_by_tier: list[int] = Field(
        default_factory=lambda: list(bc.COMMISSION_DEPTH_BY_TIER)
    )
    success_reward_bps: int = Field(default=bc.SUCCESS_REWARD_BPS, ge=0, le=bc.BPS_DENOMINATOR)
    success_reward_requirement: int = Field(default=bc.SUCCESS_REWARD_REQUIREMENT, ge=0)
    auto_withdraw_delay: int = Field(
        default=bc.AUTO_WITHDRAW_DELAY_SECONDS, ge=0,
        description="Seconds after a position opens before auto-withdraw is allowed"
    )

    # Subscription
    subscription_guarantee_share: int = bc.SUBSCRIPTION_GUARANTEE_SHARE
    subscription_treasury_share: int = bc.SUBSCRIPTION_TREASURY_SHARE
    subscription_share_denominator: int = bc.SUBSCRIPTION_SHARE_DENOMINATOR
    code_subscription_tier: int = Field(default=0, ge=0)
    max_referral_depth: int = Field(default=bc.MAX_REFERRAL_DEPTH, gt=0)

    # Asset ledger
    asset_guarantee_fee: int = bc.ASSET_GUARANTEE_FEE
    asset_treasury_fee: int = bc.ASSET_TREASURY_FEE
    asset_fee_denominator: int = bc.ASSET_FEE_DENOMINATOR
    whitelist_fee_exempt: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "owner_address",
        "root_referral_address",
        "fee_to_address",
        "guarantee_address",
        "treasury_address",
        "trusted_signer_address",
        "trading_engine_address",
        "pool_address",
        "referral_ledger_address",
    )
    @classmethod
    def validate_eth_address(cls, v: str) -> str:
        """Validate and lowercase address."""
        return normalize_address(v)

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL (async drivers only)."""
        if not v.startswith(("sqlite+aiosqlite://", "postgresql+asyncpg://")):
            raise ValueError(
                "DATABASE_URL must start with sqlite+aiosqlite:// "
                "or postgresql+asyncpg://"
            )
        return v

    @model_validator(mode="after")
    def validate_economics(self) -> "Settings":
        """Validate fee splits and profit distribution."""
        bc.validate_shares(
            self.subscription_guarantee_share,
            self.subscription_treasury_share,
            self.subscription_share_denominator,
        )
        bc.validate_shares(
            self.asset_guarantee_fee,
            self.asset_treasury_fee,
            self.asset_fee_denominator,
        )
        bc.validate_profit_distribution(
            self.commission_ladder_bps, self.user_share_bps
        )
        if self.liquidity_fee_bps > self.pricing_fee_bps:
            # Pool would be credited less than tokens are priced on
            logger.warning(
                "Liquidity fee exceeds pricing fee; price will fall on buys",
                extra={
                    "pricing_fee_bps": self.pricing_fee_bps,
                    "liquidity_fee_bps": self.liquidity_fee_bps,
                },
            )
        return self

    @model_validator(mode="after")
    def validate_production(self) -> "Settings":
        """Validate production-specific requirements."""
        if self.environment == "production":
            if self.debug:
                raise ValueError(
                    "DEBUG must be False in production environment. "
                    "Set DEBUG=false in your .env file."
                )
            if self.database_url.startswith("sqlite"):
                logger.warning(
                    "DATABASE_URL points at SQLite in production; "
                    "use postgresql+asyncpg:// for concurrent workers."
                )
        return self


# Global settings instance
settings = Settings()
