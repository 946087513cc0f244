"""Process-wide bubus EventBus carrying order, copy-trade and resolution events."""

from __future__ import annotations

from functools import lru_cache

from bubus import EventBus  # type: ignore[import-untyped]

# Events are fire-and-forget notifications; keep a short in-memory history, no WAL.
EVENT_HISTORY_SIZE = 100


@lru_cache
def get_event_bus() -> EventBus:
    """Return the shared event bus, created on first call.

    Tests build their own bus (or a fake) and inject it instead.
    """
    return EventBus(name="CopyTradeEngine", max_history_size=EVENT_HISTORY_SIZE, wal_path=None)
