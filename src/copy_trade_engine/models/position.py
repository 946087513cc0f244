# -*- coding: utf-8 -*-
"""Position: a holding as reported by the Data API /positions endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from copy_trade_engine.clients.data_api.schema import PositionSchema


def _float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True, slots=True)
class Position:
    """Exchange-reported holding. Re-fetched every pass, never cached."""

    asset: str
    """Outcome token id (CLOB token_id)."""
    condition_id: str
    size: float
    """Token count."""
    avg_price: float
    cur_price: float
    current_value: float
    redeemable: bool
    title: Optional[str] = None
    outcome: Optional[str] = None
    slug: Optional[str] = None

    @classmethod
    def from_response(cls, item: "PositionSchema | dict[str, Any]") -> Position:
        """Build from a Data API position item (camelCase keys)."""
        return cls(
            asset=str(item.get("asset") or "").strip(),
            condition_id=str(item.get("conditionId") or "").strip(),
            size=_float(item.get("size")),
            avg_price=_float(item.get("avgPrice")),
            cur_price=_float(item.get("curPrice")),
            current_value=_float(item.get("currentValue")),
            redeemable=bool(item.get("redeemable", False)),
            title=item.get("title"),
            outcome=item.get("outcome"),
            slug=item.get("slug"),
        )
