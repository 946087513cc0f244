# -*- coding: utf-8 -*-
"""Domain models."""

from copy_trade_engine.models.copy_strategy import (
    CopyStrategy,
    CopyStrategyConfig,
    OrderSizeCalculation,
)
from copy_trade_engine.models.order_book import OrderBookSnapshot, PriceLevel
from copy_trade_engine.models.position import Position
from copy_trade_engine.models.trade_record import TradeIntentRecord

__all__ = [
    "CopyStrategy",
    "CopyStrategyConfig",
    "OrderBookSnapshot",
    "OrderSizeCalculation",
    "Position",
    "PriceLevel",
    "TradeIntentRecord",
]
