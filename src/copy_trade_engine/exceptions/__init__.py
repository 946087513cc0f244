"""Exceptions subpackage."""

from copy_trade_engine.exceptions.exceptions import (
    ChainTransactionError,
    ConfigValidationError,
    InsufficientFundsOrAllowanceError,
    MissingRequiredConfigError,
    NoLiquidityError,
    OrderExecutionError,
    PolymarketAPIError,
    PolymarketError,
    RateLimitError,
    SlippageExceededError,
    TransientExecutionError,
)

__all__ = [
    "ChainTransactionError",
    "ConfigValidationError",
    "InsufficientFundsOrAllowanceError",
    "MissingRequiredConfigError",
    "NoLiquidityError",
    "OrderExecutionError",
    "PolymarketError",
    "PolymarketAPIError",
    "RateLimitError",
    "SlippageExceededError",
    "TransientExecutionError",
]
