"""Logging configuration (structlog + Logfire)."""

from copy_trade_engine.logging.config import (
    configure_logging,
    current_scoped_level,
    filter_by_scoped_level,
    scoped_log_level,
)

__all__ = [
    "configure_logging",
    "current_scoped_level",
    "filter_by_scoped_level",
    "scoped_log_level",
]
