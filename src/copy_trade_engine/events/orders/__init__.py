# -*- coding: utf-8 -*-
"""Order execution and copy-trade events."""

from copy_trade_engine.events.orders.copy_trade_events import (
    CopyTradeExecutedEvent,
    CopyTradeFailedEvent,
    PositionResolvedEvent,
)
from copy_trade_engine.events.orders.order_execution_events import (
    OrderPlacedEvent,
)

__all__ = [
    "CopyTradeExecutedEvent",
    "CopyTradeFailedEvent",
    "OrderPlacedEvent",
    "PositionResolvedEvent",
]
