"""Data API response types, limited to the keys the engine reads (camelCase as returned)."""

from __future__ import annotations

from typing import Literal, TypedDict


class TradeSchema(TypedDict, total=False):
    """GET /trades item."""

    proxyWallet: str
    side: Literal["BUY", "SELL"]
    asset: str
    conditionId: str
    size: float
    price: float
    usdcSize: float
    timestamp: int
    transactionHash: str
    title: str
    slug: str
    outcome: str


class PositionSchema(TypedDict, total=False):
    """GET /positions item.

    curPrice near 1 or 0 marks a resolved market; redeemable is only true once
    the condition has been reported on chain.
    """

    asset: str
    conditionId: str
    size: float
    avgPrice: float
    curPrice: float
    currentValue: float
    redeemable: bool
    title: str
    slug: str
    outcome: str
