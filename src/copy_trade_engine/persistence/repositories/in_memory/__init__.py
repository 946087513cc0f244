"""In-memory repository implementations."""

from copy_trade_engine.persistence.repositories.in_memory.trade_record_repository import (
    InMemoryTradeRecordRepository,
)

__all__ = ["InMemoryTradeRecordRepository"]
