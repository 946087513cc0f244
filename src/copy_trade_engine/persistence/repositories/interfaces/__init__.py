# -*- coding: utf-8 -*-
"""Repository interfaces (abstractions). Implementations live in in_memory/, sql/, etc."""

from copy_trade_engine.persistence.repositories.interfaces.trade_record_repository import (
    ITradeRecordRepository,
)

__all__ = ["ITradeRecordRepository"]
