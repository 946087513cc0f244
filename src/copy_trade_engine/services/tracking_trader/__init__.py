"""Tracking trader services."""

from copy_trade_engine.services.tracking_trader.tracking import TradeTracker

__all__ = ["TradeTracker"]
