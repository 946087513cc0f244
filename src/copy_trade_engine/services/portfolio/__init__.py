"""Portfolio service: wallet cash balance and positions."""

from copy_trade_engine.services.portfolio.portfolio_service import (
    PortfolioService,
    PortfolioSnapshot,
)

__all__ = ["PortfolioService", "PortfolioSnapshot"]
