"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.config.constants import (
    DEFAULT_DEPOSIT_LOOKBACK_BLOCKS,
    DEFAULT_SCAN_CHUNK_PAUSE_SECONDS,
    DEFAULT_SCAN_MAX_CHUNK_SPAN,
    DEFAULT_SCAN_MIN_CHUNK_SPAN,
    DEFAULT_SCAN_RETRY_DELAY_SECONDS,
    DEFAULT_SCAN_TIMEOUT_SECONDS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Admin receiving wallet and token
    admin_wallet_address: str
    usdt_contract_address: str = "0x55d398326f99059ff775485246999027b3197955"
    usdt_decimals: int = Field(default=18, ge=0, le=36)
    chain_id: int = 56

    # Blockchain RPC providers (tried in this order)
    bsc_rpc_primary: str
    bsc_rpc_fallback_1: str | None = None
    bsc_rpc_fallback_2: str | None = None

    # Chunked log scan
    scan_max_chunk_span: int = Field(
        default=DEFAULT_SCAN_MAX_CHUNK_SPAN,
        gt=0,
        description="Largest block window requested in one eth_getLogs call",
    )
    scan_min_chunk_span: int = Field(
        default=DEFAULT_SCAN_MIN_CHUNK_SPAN,
        gt=0,
        description="Floor for the window when a provider rejects the range",
    )
    scan_chunk_pause_seconds: float = Field(
        default=DEFAULT_SCAN_CHUNK_PAUSE_SECONDS, ge=0
    )
    scan_retry_delay_seconds: float = Field(
        default=DEFAULT_SCAN_RETRY_DELAY_SECONDS, ge=0
    )
    deposit_lookback_blocks: int = Field(
        default=DEFAULT_DEPOSIT_LOOKBACK_BLOCKS,
        gt=0,
        description="How far back from the latest block a deposit is searched",
    )
    scan_timeout_seconds: float = Field(
        default=DEFAULT_SCAN_TIMEOUT_SECONDS, gt=0
    )

    # Ledger
    minimum_deposit_amount: Decimal = Field(default=Decimal("50"), gt=0)
    activity_threshold: Decimal = Field(
        default=Decimal("50"),
        gt=0,
        description="Balance at which a user counts as active",
    )
    daily_profit_unit: Decimal = Field(default=Decimal("1"), gt=0)
    daily_profit_interval_hours: int = Field(default=24, gt=0)

    # Withdrawals
    withdraw_min: Decimal = Field(default=Decimal("10"), gt=0)
    withdraw_currency: str = "USDT"
    withdraw_chain: str = "BEP20"

    # Exchange payout API
    binance_api_key: str | None = None
    binance_api_secret: str | None = None
    binance_network: str = "BSC"
    binance_recv_window: int = Field(default=5000, gt=0, le=60000)
    payout_timeout_seconds: float = Field(default=30.0, gt=0)

    # Redis (distributed locks)
    redis_enabled: bool = False
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    web_host: str = "0.0.0.0"
    web_port: int = Field(default=8080, ge=1, le=65535)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode='after')
    def validate_scan_window(self) -> 'Settings':
        """Keep the chunk span at or above its floor."""
        if self.scan_max_chunk_span < self.scan_min_chunk_span:
            logger.warning(
                f"SCAN_MAX_CHUNK_SPAN ({self.scan_max_chunk_span}) is below "
                f"SCAN_MIN_CHUNK_SPAN ({self.scan_min_chunk_span}), raising it"
            )
            self.scan_max_chunk_span = self.scan_min_chunk_span
        return self

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.is_production:
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )
            if not (self.binance_api_key and self.binance_api_secret):
                logger.warning(
                    'BINANCE_API_KEY / BINANCE_API_SECRET are not set. '
                    'Withdrawal approvals will fail until they are configured.'
                )
        return self

    @field_validator('admin_wallet_address', 'usdt_contract_address')
    @classmethod
    def validate_eth_address(cls, v: str) -> str:
        """Validate Ethereum address format."""
        v = v.strip()
        if not v.startswith('0x') or len(v) != 42:
            raise ValueError(
                f'Invalid Ethereum address: {v}. '
                'Must start with 0x and be 42 characters long.'
            )
        try:
            int(v[2:], 16)
        except ValueError as exc:
            raise ValueError(f'Invalid Ethereum address format: {v}') from exc
        return v.lower()

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(
            ('postgresql://', 'postgresql+asyncpg://', 'sqlite+aiosqlite://')
        ):
            raise ValueError(
                'DATABASE_URL must start with postgresql://, '
                'postgresql+asyncpg:// or sqlite+aiosqlite://'
            )
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == 'production'

    def get_rpc_urls(self) -> list[str]:
        """Configured RPC endpoints in failover order, blanks dropped."""
        urls = [
            self.bsc_rpc_primary,
            self.bsc_rpc_fallback_1,
            self.bsc_rpc_fallback_2,
        ]
        return [url.strip() for url in urls if url and url.strip()]


# Global settings instance
settings = Settings()
