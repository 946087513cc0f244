# -*- coding: utf-8 -*-
"""In-memory trade record repository (keyed by id, deduplicated by (wallet, key))."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional
from uuid import UUID

from copy_trade_engine.models.trade_record import TradeIntentRecord
from copy_trade_engine.persistence.repositories.interfaces.trade_record_repository import (
    ITradeRecordRepository,
)


def _key(wallet: str, key: str) -> tuple[str, str]:
    """Normalize dedupe key for storage (addresses are case-insensitive)."""
    return (wallet.strip().lower(), key.strip())


class InMemoryTradeRecordRepository(ITradeRecordRepository):
    """In-memory implementation of ITradeRecordRepository."""

    def __init__(self) -> None:
        """Initialize an empty in-memory store."""
        self._by_id: dict[UUID, TradeIntentRecord] = {}
        self._keys: set[tuple[str, str]] = set()

    async def get(self, record_id: UUID) -> Optional[TradeIntentRecord]:
        """Return the record by id, or None if missing."""
        return self._by_id.get(record_id)

    async def contains_key(self, trader_wallet: str, key: str) -> bool:
        """Return True if (wallet, key) has been stored."""
        return _key(trader_wallet, key) in self._keys

    async def add(self, record: TradeIntentRecord) -> bool:
        """Insert a record unless its (wallet, key) already exists."""
        k = _key(record.trader_wallet, record.key)
        if k in self._keys:
            return False
        self._keys.add(k)
        self._by_id[record.id] = record
        return True

    async def list_pending(self, retry_limit: int) -> list[TradeIntentRecord]:
        """Return unprocessed records under the retry limit, oldest trade first."""
        pending = [
            r for r in self._by_id.values() if not r.processed and r.attempts < retry_limit
        ]
        return sorted(pending, key=lambda r: r.timestamp)

    async def mark_processed(
        self,
        record_id: UUID,
        *,
        attempts: int,
        filled_usd: float = 0.0,
        processed_at: Optional[datetime] = None,
    ) -> Optional[TradeIntentRecord]:
        """Set processed=True with attempts and filled amount; None if the id is unknown."""
        record = self._by_id.get(record_id)
        if record is None:
            return None
        updated = record.with_processed(
            attempts=attempts, filled_usd=filled_usd, processed_at=processed_at
        )
        self._by_id[record_id] = updated
        return updated

    async def record_failed_attempt(self, record_id: UUID) -> Optional[TradeIntentRecord]:
        """Count one failed processing attempt; processed records are left as they are."""
        record = self._by_id.get(record_id)
        if record is None or record.processed:
            return record
        updated = replace(record, attempts=record.attempts + 1)
        self._by_id[record_id] = updated
        return updated

    async def sum_filled_usd_since(self, since: datetime) -> float:
        """Sum filled_usd of processed BUY records with processed_at >= since."""
        return sum(
            r.filled_usd
            for r in self._by_id.values()
            if r.processed
            and r.side == "BUY"
            and r.processed_at is not None
            and r.processed_at >= since
        )
