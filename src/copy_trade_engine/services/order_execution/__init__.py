"""Order execution services."""

from __future__ import annotations

from copy_trade_engine.services.order_execution.dto import (
    ExecutionOutcome,
    OrderResponse,
)
from copy_trade_engine.services.order_execution.execution_state import (
    ExecutionProgress,
    ExecutionState,
    extract_order_error,
    is_funds_or_allowance_error,
)
from copy_trade_engine.services.order_execution.order_book_executor import (
    OrderBookExecutor,
)

__all__ = [
    "ExecutionOutcome",
    "ExecutionProgress",
    "ExecutionState",
    "OrderBookExecutor",
    "OrderResponse",
    "extract_order_error",
    "is_funds_or_allowance_error",
]
