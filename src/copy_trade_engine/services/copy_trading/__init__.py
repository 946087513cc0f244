"""Copy trading: trade sizing (OPEN/REDUCE/CLOSE) and the pending-trade executor loop."""

from copy_trade_engine.services.copy_trading.trade_executor_service import (
    TradeExecutorService,
    utc_day_start,
)
from copy_trade_engine.services.copy_trading.trade_sizing import (
    TradeIntent,
    TradePlan,
    TradeSizer,
    classify_intent,
)

__all__ = [
    "TradeExecutorService",
    "TradeIntent",
    "TradePlan",
    "TradeSizer",
    "classify_intent",
    "utc_day_start",
]
