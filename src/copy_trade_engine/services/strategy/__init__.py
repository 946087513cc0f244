"""Copy sizing strategy (pure logic, no I/O)."""

from copy_trade_engine.services.strategy.copy_size_calculator import (
    BALANCE_SAFETY_FACTOR,
    CopySizeCalculator,
    lerp,
    load_strategy_config,
)

__all__ = [
    "BALANCE_SAFETY_FACTOR",
    "CopySizeCalculator",
    "lerp",
    "load_strategy_config",
]
