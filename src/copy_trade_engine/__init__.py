"""Copy trade engine for Polymarket: sizing, order book execution and position resolution."""

from copy_trade_engine.clients import AsyncClobClient, AsyncHttpClient, CtfClient, DataApiClient
from copy_trade_engine.config import get_settings
from copy_trade_engine.DI import Container
from copy_trade_engine.services import (
    CopySizeCalculator,
    OrderBookExecutor,
    PositionResolutionService,
    TradeExecutorService,
    TradeTracker,
)

__version__ = "0.1.0"
__all__ = [
    "AsyncClobClient",
    "AsyncHttpClient",
    "Container",
    "CopySizeCalculator",
    "CtfClient",
    "DataApiClient",
    "OrderBookExecutor",
    "PositionResolutionService",
    "TradeExecutorService",
    "TradeTracker",
    "get_settings",
]
