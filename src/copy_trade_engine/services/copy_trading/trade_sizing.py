# -*- coding: utf-8 -*-
"""TradeSizer: turns an observed trader trade into an executable copy plan.

Pure logic (no I/O). Classifies the trade as OPEN, REDUCE or CLOSE and computes
the target: USD for OPEN, tokens for REDUCE/CLOSE.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Literal, Optional

from copy_trade_engine.services.strategy.copy_size_calculator import CopySizeCalculator

if TYPE_CHECKING:
    from copy_trade_engine.config import Settings
    from copy_trade_engine.models.copy_strategy import CopyStrategyConfig
    from copy_trade_engine.models.position import Position
    from copy_trade_engine.models.trade_record import TradeIntentRecord


class TradeIntent(str, Enum):
    """What the follower should do in response to a trader trade."""

    OPEN = "OPEN"
    """Trader bought: buy."""
    REDUCE = "REDUCE"
    """Trader sold part of a position they still hold: sell proportionally."""
    CLOSE = "CLOSE"
    """Trader no longer holds the asset: sell the whole follower position."""


@dataclass(frozen=True)
class TradePlan:
    """Sized copy order, or the reason it must not be executed."""

    intent: TradeIntent
    side: Literal["BUY", "SELL"]
    target: float
    """USD for BUY, tokens for SELL."""
    min_size: float
    reference_price: Optional[float] = None
    """Trader's fill price; enables the buy-side slippage check."""
    skip_reason: Optional[str] = None
    reasoning: str = ""

    @property
    def should_execute(self) -> bool:
        return self.skip_reason is None and self.target > 0


def classify_intent(record: "TradeIntentRecord", trader_position: Optional["Position"]) -> TradeIntent:
    """OPEN for buys; REDUCE while the trader still holds the asset after a sell, else CLOSE."""
    if record.side == "BUY":
        return TradeIntent.OPEN
    if trader_position is not None and trader_position.size > 0:
        return TradeIntent.REDUCE
    return TradeIntent.CLOSE


class TradeSizer:
    """Sizing policy for copy trades (OPEN in USD, REDUCE/CLOSE in tokens)."""

    def __init__(
        self,
        settings: "Settings",
        strategy_config: "CopyStrategyConfig",
        calculator: Optional[CopySizeCalculator] = None,
    ) -> None:
        """Initialize the sizer.

        Args:
            settings: Application settings (uses settings.execution and settings.strategy.trade_multiplier).
            strategy_config: Validated strategy configuration.
            calculator: Optional; defaults to CopySizeCalculator().
        """
        self._settings = settings
        self._config = strategy_config
        self._calculator = calculator or CopySizeCalculator()

    @property
    def strategy_config(self) -> "CopyStrategyConfig":
        return self._config

    def plan(
        self,
        record: "TradeIntentRecord",
        *,
        follower_position: Optional["Position"],
        trader_position: Optional["Position"],
        follower_balance: float,
        trader_balance: float,
        daily_volume_used: float = 0.0,
    ) -> TradePlan:
        """Build the copy plan for one trader trade.

        Args:
            record: Trader trade to copy.
            follower_position: Follower's current position in record.asset, if any.
            trader_position: Trader's current position in record.asset, if any (after the trade).
            follower_balance: Follower's USDC balance.
            trader_balance: Trader's portfolio value (sum of position current values).
            daily_volume_used: USD the follower already bought today (for the daily volume cap).
        """
        intent = classify_intent(record, trader_position)
        if intent == TradeIntent.OPEN:
            return self._plan_open(record, follower_position, follower_balance, trader_balance, daily_volume_used)
        return self._plan_sell(intent, record, follower_position, trader_position)

    def _plan_open(
        self,
        record: "TradeIntentRecord",
        follower_position: Optional["Position"],
        follower_balance: float,
        trader_balance: float,
        daily_volume_used: float,
    ) -> TradePlan:
        execution = self._settings.execution
        min_usd = execution.min_order_size_usd
        reference_price = record.price if record.price > 0 else None
        trader_usd = max(0.0, record.usdc_size)
        balance = max(0.0, follower_balance)

        if execution.sizing_mode == "proportional":
            denominator = max(0.0, trader_balance) + trader_usd
            ratio = balance / denominator if denominator > 0 else 0.0
            target = trader_usd * ratio
            reasoning = f"{ratio * 100:.1f}% of trader's ${trader_usd:.2f} = ${target:.2f}"
            multiplier = self._settings.strategy.trade_multiplier
            if target < min_usd and multiplier != 1.0:
                target *= multiplier
                reasoning += f" -> x{multiplier} below ${min_usd} = ${target:.2f}"
        else:
            current_value = follower_position.current_value if follower_position else 0.0
            calc = self._calculator.calculate(self._config, trader_usd, balance, max(0.0, current_value))
            target = calc.final_amount
            reasoning = calc.reasoning
            if not calc.should_execute:
                return TradePlan(
                    intent=TradeIntent.OPEN,
                    side="BUY",
                    target=0.0,
                    min_size=min_usd,
                    reference_price=reference_price,
                    skip_reason="below_minimum",
                    reasoning=reasoning,
                )

        daily_cap = self._config.max_daily_volume_usd
        if daily_cap:
            left = max(0.0, daily_cap - daily_volume_used)
            if target > left:
                target = left
                reasoning += f" -> Capped at daily volume left ${left:.2f}"

        max_affordable = balance * execution.balance_buffer
        if target > max_affordable:
            target = max_affordable
            reasoning += f" -> Reduced to fit balance (${max_affordable:.2f})"

        skip_reason = None
        if target < min_usd:
            skip_reason = "daily_volume_exhausted" if daily_cap and daily_volume_used >= daily_cap else "below_minimum"
            reasoning += f" -> Below minimum ${min_usd}"

        return TradePlan(
            intent=TradeIntent.OPEN,
            side="BUY",
            target=target if skip_reason is None else 0.0,
            min_size=min_usd,
            reference_price=reference_price,
            skip_reason=skip_reason,
            reasoning=reasoning,
        )

    def _plan_sell(
        self,
        intent: TradeIntent,
        record: "TradeIntentRecord",
        follower_position: Optional["Position"],
        trader_position: Optional["Position"],
    ) -> TradePlan:
        min_tokens = self._settings.execution.min_sell_tokens
        held = follower_position.size if follower_position else 0.0
        if held <= 0:
            return TradePlan(
                intent=intent,
                side="SELL",
                target=0.0,
                min_size=min_tokens,
                skip_reason="no_follower_position",
                reasoning="No follower position to sell",
            )

        if intent == TradeIntent.REDUCE and trader_position is not None:
            sold = max(0.0, record.size)
            ratio = sold / (trader_position.size + sold) if trader_position.size + sold > 0 else 0.0
            multiplier = self._settings.strategy.trade_multiplier
            target = held * ratio * multiplier
            reasoning = f"{ratio * 100:.1f}% of follower's {held:.4f} tokens x{multiplier} = {target:.4f}"
        else:
            target = held
            reasoning = f"Close follower's {held:.4f} tokens"

        if target > held:
            target = held
            reasoning += " -> Capped at position size"

        skip_reason = None
        if target < min_tokens:
            skip_reason = "below_minimum"
            reasoning += f" -> Below minimum {min_tokens} tokens"

        return TradePlan(
            intent=intent,
            side="SELL",
            target=target if skip_reason is None else 0.0,
            min_size=min_tokens,
            skip_reason=skip_reason,
            reasoning=reasoning,
        )
