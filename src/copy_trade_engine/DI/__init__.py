"""Dependency injection."""

from copy_trade_engine.DI.container import Container

__all__ = ["Container"]
