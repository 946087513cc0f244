# -*- coding: utf-8 -*-
"""Event bus and event types."""

from copy_trade_engine.events.bus import get_event_bus
from copy_trade_engine.events.orders import (
    CopyTradeExecutedEvent,
    CopyTradeFailedEvent,
    OrderPlacedEvent,
    PositionResolvedEvent,
)

__all__ = [
    "get_event_bus",
    "CopyTradeExecutedEvent",
    "CopyTradeFailedEvent",
    "OrderPlacedEvent",
    "PositionResolvedEvent",
]
