# -*- coding: utf-8 -*-
"""Application services."""

from copy_trade_engine.services.copy_trading import (
    TradeExecutorService,
    TradeIntent,
    TradePlan,
    TradeSizer,
)
from copy_trade_engine.services.notifications import ExecutionNotifier
from copy_trade_engine.services.order_execution import ExecutionOutcome, OrderBookExecutor
from copy_trade_engine.services.portfolio import PortfolioService, PortfolioSnapshot
from copy_trade_engine.services.resolution import (
    PositionResolutionService,
    ResolveMethod,
    ResolveResult,
)
from copy_trade_engine.services.strategy import CopySizeCalculator, load_strategy_config
from copy_trade_engine.services.tracking_trader import TradeTracker

__all__ = [
    "CopySizeCalculator",
    "ExecutionNotifier",
    "ExecutionOutcome",
    "OrderBookExecutor",
    "PortfolioService",
    "PortfolioSnapshot",
    "PositionResolutionService",
    "ResolveMethod",
    "ResolveResult",
    "TradeExecutorService",
    "TradeIntent",
    "TradePlan",
    "TradeSizer",
    "TradeTracker",
    "load_strategy_config",
]
