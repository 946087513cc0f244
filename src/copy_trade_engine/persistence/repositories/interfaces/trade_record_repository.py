# -*- coding: utf-8 -*-
"""Abstract interface for trade record storage (in-memory, DB, etc.)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from copy_trade_engine.models.trade_record import TradeIntentRecord


class ITradeRecordRepository(ABC):
    """Interface for persisting TradeIntentRecord (observed trader trades and their copy status)."""

    @abstractmethod
    async def get(self, record_id: UUID) -> Optional[TradeIntentRecord]:
        """Return the record by id, or None if missing."""
        ...

    @abstractmethod
    async def contains_key(self, trader_wallet: str, key: str) -> bool:
        """Return True if a record with this dedupe key exists for the wallet."""
        ...

    @abstractmethod
    async def add(self, record: TradeIntentRecord) -> bool:
        """Insert a record. Returns False (and stores nothing) if (wallet, key) already exists."""
        ...

    @abstractmethod
    async def list_pending(self, retry_limit: int) -> list[TradeIntentRecord]:
        """Return records with processed=False and attempts < retry_limit, oldest trade first."""
        ...

    @abstractmethod
    async def mark_processed(
        self,
        record_id: UUID,
        *,
        attempts: int,
        filled_usd: float = 0.0,
        processed_at: Optional[datetime] = None,
    ) -> Optional[TradeIntentRecord]:
        """Set the terminal state of a record. Returns the updated record, or None if missing."""
        ...

    @abstractmethod
    async def record_failed_attempt(self, record_id: UUID) -> Optional[TradeIntentRecord]:
        """Increment attempts of a record that is still pending (processed stays False).

        Once attempts reaches the retry limit the record drops out of list_pending().
        Returns the updated record, or None if missing.
        """
        ...

    @abstractmethod
    async def sum_filled_usd_since(self, since: datetime) -> float:
        """Sum filled_usd of BUY records processed at or after `since`."""
        ...
