"""Configuration subpackage."""

from copy_trade_engine.config.config import (
    ApiSettings,
    AppSettings,
    ChainSettings,
    ConsoleNotificationSettings,
    ExecutionSettings,
    LoggingSettings,
    PolymarketClobSettings,
    ResolverSettings,
    Settings,
    StrategySettings,
    TelegramNotificationSettings,
    TrackingSettings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "ChainSettings",
    "ConsoleNotificationSettings",
    "ExecutionSettings",
    "LoggingSettings",
    "PolymarketClobSettings",
    "ResolverSettings",
    "Settings",
    "StrategySettings",
    "TelegramNotificationSettings",
    "TrackingSettings",
    "get_settings",
]
