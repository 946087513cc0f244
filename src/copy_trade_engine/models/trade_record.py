# -*- coding: utf-8 -*-
"""TradeIntentRecord: an observed trader trade waiting to be copied.

Owned by the trade record repository. The engine reads pending records and asks
for a single terminal update (processed=True, attempts=N) per record.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any, Literal, Optional
from uuid import UUID, uuid4

from copy_trade_engine.utils.dedupe import trade_key

Side = Literal["BUY", "SELL"]


def _float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass(frozen=True, slots=True)
class TradeIntentRecord:
    """Trader trade to copy, plus the engine's processing state."""

    id: UUID
    key: str
    """Dedupe key from utils.dedupe.trade_key() (tx:..., id:..., cmp:...)."""
    trader_wallet: str
    side: Side
    asset: str
    condition_id: str
    size: float
    """Token count traded by the trader."""
    usdc_size: float
    """Notional in USD traded by the trader."""
    price: float
    timestamp: int
    """Epoch seconds of the trader's fill."""

    processed: bool = False
    attempts: int = 0
    filled_usd: float = 0.0
    """USD notional the follower actually traded for this record."""
    processed_at: Optional[datetime] = None

    title: Optional[str] = None
    slug: Optional[str] = None
    outcome: Optional[str] = None

    @classmethod
    def from_trade(
        cls,
        trader_wallet: str,
        trade: dict[str, Any],
        *,
        processed: bool = False,
        id: Optional[UUID] = None,
    ) -> TradeIntentRecord:
        """Build from a Data API /trades item.

        usdc_size falls back to size * price when the API omits usdcSize.

        Raises:
            ValueError: If side or asset is missing.
        """
        side = str(trade.get("side") or "").upper()
        if side not in ("BUY", "SELL"):
            raise ValueError(f"Unsupported trade side: {trade.get('side')!r}")
        asset = str(trade.get("asset") or "").strip()
        if not asset:
            raise ValueError("Trade has no asset")
        size = _float(trade.get("size"))
        price = _float(trade.get("price"))
        usdc_size = _float(trade.get("usdcSize")) or size * price
        return cls(
            id=id or uuid4(),
            key=trade_key(trade),
            trader_wallet=trader_wallet.strip(),
            side=side,  # type: ignore[arg-type]
            asset=asset,
            condition_id=str(trade.get("conditionId") or "").strip(),
            size=size,
            usdc_size=usdc_size,
            price=price,
            timestamp=int(_float(trade.get("timestamp"))),
            processed=processed,
            processed_at=datetime.now(UTC) if processed else None,
            title=trade.get("title"),
            slug=trade.get("slug"),
            outcome=trade.get("outcome"),
        )

    def with_processed(
        self,
        *,
        attempts: int,
        filled_usd: float = 0.0,
        processed_at: Optional[datetime] = None,
    ) -> TradeIntentRecord:
        """Return a copy in its terminal state."""
        return replace(
            self,
            processed=True,
            attempts=attempts,
            filled_usd=filled_usd,
            processed_at=processed_at or datetime.now(UTC),
        )
