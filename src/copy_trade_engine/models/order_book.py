# -*- coding: utf-8 -*-
"""Order book snapshot: bid/ask levels fetched per execution attempt."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional


@dataclass(frozen=True, slots=True)
class PriceLevel:
    """One price level of the book."""

    price: float
    size: float
    """Token count available at price."""

    @property
    def notional(self) -> float:
        """USD value of the level (size * price)."""
        return self.size * self.price

    @classmethod
    def parse(cls, raw: Any) -> Optional[PriceLevel]:
        """Parse a level from py_clob_client's OrderSummary or a {price, size} dict.

        Returns None for malformed levels.
        """
        if isinstance(raw, dict):
            price, size = raw.get("price"), raw.get("size")
        else:
            price, size = getattr(raw, "price", None), getattr(raw, "size", None)
        try:
            return cls(price=float(price), size=float(size))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None


def _levels(raw_levels: Optional[Iterable[Any]]) -> tuple[PriceLevel, ...]:
    levels: list[PriceLevel] = []
    for raw in raw_levels or ():
        level = PriceLevel.parse(raw)
        if level is not None:
            levels.append(level)
    return tuple(levels)


@dataclass(frozen=True, slots=True)
class OrderBookSnapshot:
    """Best-known bids/asks at query time. Discarded after use."""

    asset: str
    bids: tuple[PriceLevel, ...]
    asks: tuple[PriceLevel, ...]

    @classmethod
    def from_summary(cls, asset: str, summary: Any) -> OrderBookSnapshot:
        """Build from py_clob_client's OrderBookSummary (or an equivalent dict)."""
        if isinstance(summary, dict):
            bids, asks = summary.get("bids"), summary.get("asks")
        else:
            bids, asks = getattr(summary, "bids", None), getattr(summary, "asks", None)
        return cls(asset=asset, bids=_levels(bids), asks=_levels(asks))

    def best_bid(self) -> Optional[PriceLevel]:
        """Highest bid (linear scan; level ordering is not trusted)."""
        best: Optional[PriceLevel] = None
        for level in self.bids:
            if best is None or level.price > best.price:
                best = level
        return best

    def best_ask(self) -> Optional[PriceLevel]:
        """Lowest ask (linear scan; level ordering is not trusted)."""
        best: Optional[PriceLevel] = None
        for level in self.asks:
            if best is None or level.price < best.price:
                best = level
        return best
