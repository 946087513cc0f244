# -*- coding: utf-8 -*-
"""Copy strategy configuration and the sizing result record.

CopyStrategyConfig is immutable once loaded; OrderSizeCalculation is created
fresh by CopySizeCalculator.calculate() and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CopyStrategy(str, Enum):
    """How the base copy amount is derived from the trader's order."""

    PERCENTAGE = "PERCENTAGE"
    """copy_size percent of the trader's order."""
    FIXED = "FIXED"
    """copy_size USD per trade, regardless of the trader's order."""
    ADAPTIVE = "ADAPTIVE"
    """Percent interpolated around copy_size by trader order size vs threshold."""


@dataclass(frozen=True, slots=True)
class CopyStrategyConfig:
    """Strategy variant, its main parameter and the safety limits."""

    strategy: CopyStrategy
    copy_size: float
    max_order_size_usd: float
    min_order_size_usd: float
    adaptive_min_percent: Optional[float] = None
    """Percent used for very large orders (ADAPTIVE only)."""
    adaptive_max_percent: Optional[float] = None
    """Percent used for very small orders (ADAPTIVE only)."""
    adaptive_threshold: Optional[float] = None
    """Trader order size (USD) at which the percent equals copy_size. Default 500."""
    max_position_size_usd: Optional[float] = None
    max_daily_volume_usd: Optional[float] = None


@dataclass(frozen=True, slots=True)
class OrderSizeCalculation:
    """Outcome of sizing one copy trade, with the reasoning trail for logs."""

    trader_order_size: float
    base_amount: float
    final_amount: float
    """0 means do not execute."""
    strategy: CopyStrategy
    capped_by_max: bool
    reduced_by_balance: bool
    below_minimum: bool
    reasoning: str

    @property
    def should_execute(self) -> bool:
        return self.final_amount > 0
