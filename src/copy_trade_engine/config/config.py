# -*- coding: utf-8 -*-
"""Configuration loaded from environment via Pydantic Settings.

Nested env vars use <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, STRATEGY__COPY_SIZE.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """General application configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "copy-trade-engine"
    service_name: Optional[str] = None
    service_version: Optional[str] = None
    environment: Literal["development", "test", "production"] = "development"


class LoggingSettings(BaseSettings):
    """Structured logging configuration for structlog/stdlib/Logfire."""

    model_config = SettingsConfigDict(extra="ignore")

    # Per-target levels (only the 5 standard levels)
    console_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    logfire_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Local outputs
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "logs/copy_trade_engine.log"
    # TimedRotatingFileHandler: when to rotate (S/M/H/D/W0–W6/midnight), interval, backups to keep
    log_file_when: Literal[
        "S", "M", "H", "D", "W0", "W1", "W2", "W3", "W4", "W5", "W6", "midnight"
    ] = "midnight"
    log_file_interval: int = 1
    log_file_backup_count: int = 30
    log_file_utc: bool = True

    # Main output format: JSONRenderer if True, ConsoleRenderer if False
    json_format: bool = False

    # Level applied inside scoped_log_level() blocks (e.g. CLOB credential derivation)
    quiet_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    # Logfire integration via structlog
    logfire_enabled: bool = False
    logfire_token: Optional[str] = None


class ApiSettings(BaseSettings):
    """Configuration for the Polymarket Data API (HTTP)."""

    model_config = SettingsConfigDict(extra="ignore")

    data_api_host: str = Field(
        default="https://data-api.polymarket.com",
        description="Polymarket Data API base URL.",
    )
    timeout_seconds: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="HTTP request timeout in seconds.",
    )
    max_retries: int = Field(
        default=6,
        ge=1,
        le=20,
        description="Maximum number of retries for failed requests.",
    )
    positions_page_size: int = Field(
        default=500,
        ge=1,
        le=500,
        description="Page size used when loading the complete position set.",
    )


class PolymarketClobSettings(BaseSettings):
    """Polymarket CLOB/trading credentials and wallet (from env POLYMARKET__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    clob_host: str = Field(
        default="https://clob.polymarket.com",
        description="Polymarket CLOB API base URL.",
    )
    chain_id: int = Field(default=137, description="Chain ID (e.g. 137 for Polygon).")
    signature_type: int = Field(
        default=2,
        description="Signature type for CLOB (2 = Gnosis Safe proxy wallet).",
    )
    private_key: Optional[str] = Field(default=None, description="Wallet private key.")
    api_key: Optional[str] = Field(default=None, description="Polymarket API key.")
    api_secret: Optional[str] = Field(default=None, description="Polymarket API secret.")
    api_passphrase: Optional[str] = Field(default=None, description="Polymarket API passphrase.")
    funder: Optional[str] = Field(
        default=None,
        description="Follower proxy wallet address (Wallet Address in Polymarket UI).",
    )


class ChainSettings(BaseSettings):
    """Polygon RPC and contract addresses used for balances and redemption (CHAIN__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    rpc_url: str = Field(
        default="https://polygon-rpc.com",
        description="Polygon JSON-RPC endpoint.",
    )
    usdc_address: str = Field(
        default="0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174",
        description="USDC.e collateral token on Polygon.",
    )
    ctf_address: str = Field(
        default="0x4D97DCd97eC945f40cF65F87097ACe5EA0476045",
        description="Conditional Tokens Framework contract.",
    )
    usdc_decimals: int = Field(default=6, ge=0, le=36)
    gas_limit: int = Field(default=500_000, ge=21_000)
    gas_price_multiplier: float = Field(
        default=1.2,
        ge=1.0,
        le=5.0,
        description="Multiplier applied to the network gas price estimate.",
    )
    receipt_timeout_seconds: float = Field(
        default=300.0,
        ge=1.0,
        le=3600.0,
        description="Maximum wait for a transaction receipt.",
    )


class TelegramNotificationSettings(BaseSettings):
    """Telegram notifications (from env TELEGRAM__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = False
    api_key: Optional[str] = Field(default=None, description="Telegram bot API key.")
    chat_id: Optional[str] = Field(default=None, description="Telegram chat ID.")
    messages_per_minute: int = Field(default=30, ge=1, le=120)
    max_retries: int = Field(default=5, ge=0, le=20)
    backoff_base_seconds: float = Field(default=1.0, ge=0.1, le=60.0)
    connect_timeout: float = Field(default=10.0, ge=0.1, le=60.0)
    read_timeout: float = Field(default=20.0, ge=0.1, le=120.0)
    write_timeout: float = Field(default=20.0, ge=0.1, le=120.0)
    pool_timeout: float = Field(default=10.0, ge=0.1, le=60.0)


class ConsoleNotificationSettings(BaseSettings):
    """Console notification settings."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = True


class TrackingSettings(BaseSettings):
    """Configuration for trade tracking (polling)."""

    model_config = SettingsConfigDict(extra="ignore")

    # Raw string from env so pydantic-settings does not try to JSON-decode it (list[str] would trigger json.loads).
    target_wallets_raw: str = Field(
        default="",
        description="Wallet addresses to copy, comma-separated. Env: TRACKING__TARGET_WALLETS.",
        validation_alias="target_wallets",
    )
    poll_seconds: float = Field(
        default=3.0,
        ge=0.5,
        le=60.0,
        description="Polling interval in seconds for trade tracking.",
    )
    trades_limit: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Number of trades to fetch per poll.",
    )
    too_old_hours: float = Field(
        default=24.0,
        gt=0.0,
        description="Trades older than this are ignored when first seen.",
    )

    @computed_field
    @property
    def target_wallets(self) -> list[str]:
        """Parse comma-separated target_wallets_raw into list of stripped strings."""
        if not self.target_wallets_raw or not self.target_wallets_raw.strip():
            return []
        return [s.strip() for s in self.target_wallets_raw.split(",") if s.strip()]


class StrategySettings(BaseSettings):
    """Copy strategy and its safety limits (STRATEGY__*).

    Loaded into an immutable CopyStrategyConfig by load_strategy_config().
    """

    model_config = SettingsConfigDict(extra="ignore")

    strategy: Literal["PERCENTAGE", "FIXED", "ADAPTIVE"] = "PERCENTAGE"
    copy_size: float = Field(
        default=10.0,
        description="Percent of the trader's order (PERCENTAGE/ADAPTIVE) or USD per trade (FIXED).",
    )
    adaptive_min_percent: Optional[float] = None
    adaptive_max_percent: Optional[float] = None
    adaptive_threshold_usd: Optional[float] = None
    max_order_size_usd: float = 100.0
    min_order_size_usd: float = 1.0
    max_position_size_usd: Optional[float] = None
    max_daily_volume_usd: Optional[float] = None
    trade_multiplier: float = Field(
        default=1.0,
        gt=0.0,
        description="Scales tiny OPEN copies (proportional mode) and REDUCE copies.",
    )


class ExecutionSettings(BaseSettings):
    """Order execution loop settings (EXECUTION__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    retry_limit: int = Field(default=3, ge=1, le=20)
    poll_seconds: float = Field(
        default=1.0,
        ge=0.1,
        le=60.0,
        description="Interval between passes over pending trade records.",
    )
    min_order_size_usd: float = Field(
        default=1.0,
        gt=0.0,
        description="Exchange-enforced minimum for buy orders.",
    )
    min_sell_tokens: float = Field(
        default=1.0,
        gt=0.0,
        description="Minimum tradable size for sell orders (token count).",
    )
    slippage_tolerance: float = Field(
        default=0.05,
        ge=0.0,
        le=1.0,
        description="Maximum distance between best ask and the copied price.",
    )
    balance_buffer: float = Field(default=0.99, gt=0.0, le=1.0)
    sizing_mode: Literal["strategy", "proportional"] = Field(
        default="strategy",
        description="OPEN sizing: CopySizeCalculator ('strategy') or account-ratio scaling ('proportional').",
    )


class ResolverSettings(BaseSettings):
    """Resolved-position liquidation and redemption (RESOLVER__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = True
    interval_seconds: float = Field(default=300.0, ge=1.0, le=86_400.0)
    resolved_high: float = Field(default=0.99, gt=0.5, le=1.0)
    resolved_low: float = Field(default=0.01, ge=0.0, lt=0.5)
    min_sell_tokens: float = Field(default=1.0, gt=0.0)
    min_position_size: float = Field(
        default=0.0001,
        ge=0.0,
        description="Positions at or below this size are treated as empty.",
    )
    retry_limit: int = Field(default=3, ge=1, le=20)


class Settings(BaseSettings):
    """Root application configuration.

    Groups all sub-configurations so the rest of the code does not
    read environment variables directly. Nested overrides use
    <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, STRATEGY__COPY_SIZE.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    polymarket: PolymarketClobSettings = Field(default_factory=PolymarketClobSettings)
    chain: ChainSettings = Field(default_factory=ChainSettings)
    tracking: TrackingSettings = Field(default_factory=TrackingSettings)
    strategy: StrategySettings = Field(default_factory=StrategySettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    telegram: TelegramNotificationSettings = Field(default_factory=TelegramNotificationSettings)
    console: ConsoleNotificationSettings = Field(default_factory=ConsoleNotificationSettings)

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Build settings from environment (and .env), with optional overrides.

        Nested overrides can be passed as nested dicts, e.g.:
        - from_env(api={"timeout_seconds": 30})
        - from_env(strategy={"strategy": "FIXED", "copy_size": 25})

        Returns:
            A new Settings instance.
        """
        return cls(**overrides)


@lru_cache
def get_settings() -> Settings:
    """Return a single cached instance of Settings.

    Typical usage:

        from copy_trade_engine.config import get_settings

        settings = get_settings()
        retry_limit = settings.execution.retry_limit
        strategy = settings.strategy.strategy
    """
    return Settings()
