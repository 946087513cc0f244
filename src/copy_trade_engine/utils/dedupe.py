"""Deduplication key for trader trades observed on the Data API."""

from __future__ import annotations

from typing import Any


def trade_key(t: dict[str, Any]) -> str:
    """Return a stable key identifying one trader fill.

    Prefers transaction hash (qualified by asset and side, since one transaction
    can settle fills for several outcome tokens), then id, then a composite of
    timestamp|conditionId|asset|side|price|size.
    """
    asset = str(t.get("asset") or "").strip()
    side = str(t.get("side") or "").upper()

    tx = t.get("transactionHash") or t.get("txHash") or t.get("hash")
    if isinstance(tx, str) and tx:
        return f"tx:{tx.lower()}:{asset}:{side}"

    tid = t.get("id")
    if tid is not None:
        return f"id:{tid}"

    ts = str(t.get("timestamp") or "")
    cid = str(t.get("conditionId") or t.get("market") or "")
    price = str(t.get("price") or "")
    size = str(t.get("size") or "")
    return f"cmp:{ts}|{cid}|{asset}|{side}|{price}|{size}"
