# -*- coding: utf-8 -*-
"""CopySizeCalculator: pure logic turning a trader's order into a bounded copy size.

No I/O. Limits are applied in a fixed order and each may only shrink the amount:
max order size, max position size, available balance (1% buffer), minimum order size.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from copy_trade_engine.exceptions import ConfigValidationError
from copy_trade_engine.models.copy_strategy import (
    CopyStrategy,
    CopyStrategyConfig,
    OrderSizeCalculation,
)

if TYPE_CHECKING:
    from copy_trade_engine.config import StrategySettings

BALANCE_SAFETY_FACTOR = 0.99
DEFAULT_ADAPTIVE_THRESHOLD = 500.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation from a to b with t clamped to [0, 1]."""
    return a + (b - a) * _clamp(t, 0.0, 1.0)


class CopySizeCalculator:
    """Pure sizing policy for copy trades (PERCENTAGE, FIXED, ADAPTIVE)."""

    def adaptive_percent(self, config: CopyStrategyConfig, trader_order_size: float) -> float:
        """Effective percent for ADAPTIVE sizing.

        Equals copy_size at the threshold, rises toward adaptive_max_percent for
        small orders and decays toward adaptive_min_percent for large ones
        (reached at twice the threshold).
        """
        min_percent = (
            config.adaptive_min_percent if config.adaptive_min_percent is not None else config.copy_size
        )
        max_percent = (
            config.adaptive_max_percent if config.adaptive_max_percent is not None else config.copy_size
        )
        threshold = config.adaptive_threshold or DEFAULT_ADAPTIVE_THRESHOLD

        if trader_order_size >= threshold:
            factor = _clamp(trader_order_size / threshold - 1, 0.0, 1.0)
            return lerp(config.copy_size, min_percent, factor)
        factor = trader_order_size / threshold
        return lerp(max_percent, config.copy_size, factor)

    def calculate(
        self,
        config: CopyStrategyConfig,
        trader_order_size: float,
        available_balance: float,
        current_position_size: float = 0.0,
    ) -> OrderSizeCalculation:
        """Size a copy order.

        Args:
            config: Strategy and safety limits.
            trader_order_size: Trader's order notional in USD (>= 0).
            available_balance: Follower's spendable USDC (>= 0).
            current_position_size: Follower's current exposure in the asset, USD (>= 0).

        Returns:
            OrderSizeCalculation; final_amount is 0 when the copy must not execute.

        Raises:
            ValueError: If config.strategy is not a known CopyStrategy.
        """
        strategy = config.strategy
        if strategy == CopyStrategy.PERCENTAGE:
            base_amount = trader_order_size * (config.copy_size / 100)
            reasoning = (
                f"{config.copy_size}% of trader's ${trader_order_size:.2f} = ${base_amount:.2f}"
            )
        elif strategy == CopyStrategy.FIXED:
            base_amount = config.copy_size
            reasoning = f"Fixed amount: ${base_amount:.2f}"
        elif strategy == CopyStrategy.ADAPTIVE:
            percent = self.adaptive_percent(config, trader_order_size)
            base_amount = trader_order_size * (percent / 100)
            reasoning = (
                f"Adaptive {percent:.1f}% of trader's ${trader_order_size:.2f} = ${base_amount:.2f}"
            )
        else:
            raise ValueError(f"Unknown strategy: {strategy!r}")

        final_amount = base_amount
        capped_by_max = False
        reduced_by_balance = False
        below_minimum = False

        # 1. Max order size
        if final_amount > config.max_order_size_usd:
            final_amount = config.max_order_size_usd
            capped_by_max = True
            reasoning += f" -> Capped at max ${config.max_order_size_usd}"

        # 2. Max position size (unset or 0 disables the limit)
        if config.max_position_size_usd:
            if current_position_size + final_amount > config.max_position_size_usd:
                allowed = max(0.0, config.max_position_size_usd - current_position_size)
                if allowed < config.min_order_size_usd:
                    final_amount = 0.0
                    reasoning += " -> Position limit reached"
                else:
                    final_amount = allowed
                    reasoning += " -> Reduced to fit position limit"

        # 3. Available balance with safety buffer
        max_affordable = available_balance * BALANCE_SAFETY_FACTOR
        if final_amount > max_affordable:
            final_amount = max_affordable
            reduced_by_balance = True
            reasoning += f" -> Reduced to fit balance (${max_affordable:.2f})"

        # 4. Minimum order size
        if final_amount < config.min_order_size_usd:
            below_minimum = True
            reasoning += f" -> Below minimum ${config.min_order_size_usd}"
            final_amount = 0.0

        return OrderSizeCalculation(
            trader_order_size=trader_order_size,
            base_amount=base_amount,
            final_amount=final_amount,
            strategy=strategy,
            capped_by_max=capped_by_max,
            reduced_by_balance=reduced_by_balance,
            below_minimum=below_minimum,
            reasoning=reasoning,
        )

    @staticmethod
    def validate(config: CopyStrategyConfig) -> list[str]:
        """Return every violation in config (empty list when valid)."""
        errors: list[str] = []

        if config.copy_size <= 0:
            errors.append("copy_size must be positive")
        if config.strategy == CopyStrategy.PERCENTAGE and config.copy_size > 100:
            errors.append("copy_size for PERCENTAGE strategy should be <= 100")

        if config.max_order_size_usd <= 0:
            errors.append("max_order_size_usd must be positive")
        if config.min_order_size_usd <= 0:
            errors.append("min_order_size_usd must be positive")
        if config.min_order_size_usd > config.max_order_size_usd:
            errors.append("min_order_size_usd cannot be greater than max_order_size_usd")

        if config.strategy == CopyStrategy.ADAPTIVE:
            min_p, max_p = config.adaptive_min_percent, config.adaptive_max_percent
            if min_p is None or max_p is None:
                errors.append(
                    "ADAPTIVE strategy requires adaptive_min_percent and adaptive_max_percent"
                )
            elif min_p > max_p:
                errors.append("adaptive_min_percent cannot be greater than adaptive_max_percent")

        return errors

    @staticmethod
    def recommended_config(balance_usd: float) -> CopyStrategyConfig:
        """Starting configuration for a follower balance (conservative, balanced, adaptive)."""
        if balance_usd < 500:
            return CopyStrategyConfig(
                strategy=CopyStrategy.PERCENTAGE,
                copy_size=5.0,
                max_order_size_usd=20.0,
                min_order_size_usd=1.0,
                max_position_size_usd=50.0,
                max_daily_volume_usd=100.0,
            )
        if balance_usd < 2000:
            return CopyStrategyConfig(
                strategy=CopyStrategy.PERCENTAGE,
                copy_size=10.0,
                max_order_size_usd=50.0,
                min_order_size_usd=1.0,
                max_position_size_usd=200.0,
                max_daily_volume_usd=500.0,
            )
        return CopyStrategyConfig(
            strategy=CopyStrategy.ADAPTIVE,
            copy_size=10.0,
            adaptive_min_percent=5.0,
            adaptive_max_percent=15.0,
            adaptive_threshold=300.0,
            max_order_size_usd=100.0,
            min_order_size_usd=1.0,
            max_position_size_usd=1000.0,
            max_daily_volume_usd=2000.0,
        )


def load_strategy_config(settings: "StrategySettings") -> CopyStrategyConfig:
    """Build the immutable CopyStrategyConfig from STRATEGY__* settings.

    Raises:
        ConfigValidationError: With every violation, if the configuration is invalid.
    """
    config = CopyStrategyConfig(
        strategy=CopyStrategy(settings.strategy),
        copy_size=settings.copy_size,
        adaptive_min_percent=settings.adaptive_min_percent,
        adaptive_max_percent=settings.adaptive_max_percent,
        adaptive_threshold=settings.adaptive_threshold_usd,
        max_order_size_usd=settings.max_order_size_usd,
        min_order_size_usd=settings.min_order_size_usd,
        max_position_size_usd=settings.max_position_size_usd,
        max_daily_volume_usd=settings.max_daily_volume_usd,
    )
    errors = CopySizeCalculator.validate(config)
    if errors:
        raise ConfigValidationError(errors)
    return config
