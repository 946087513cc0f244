# -*- coding: utf-8 -*-
"""Repositories: interfaces (abstractions) and implementations (in_memory, etc.)."""

from copy_trade_engine.persistence.repositories.interfaces import ITradeRecordRepository
from copy_trade_engine.persistence.repositories.in_memory import InMemoryTradeRecordRepository

__all__ = ["ITradeRecordRepository", "InMemoryTradeRecordRepository"]
