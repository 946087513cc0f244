"""Persistence layer (repositories, etc.)."""

from copy_trade_engine.persistence.repositories import (
    InMemoryTradeRecordRepository,
    ITradeRecordRepository,
)

__all__ = ["ITradeRecordRepository", "InMemoryTradeRecordRepository"]
