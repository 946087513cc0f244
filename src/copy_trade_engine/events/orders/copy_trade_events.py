"""Copy-trade events (emitted by TradeExecutorService and PositionResolutionService)."""

from __future__ import annotations

from typing import Literal

from bubus import BaseEvent  # type: ignore[import-untyped]


class CopyTradeExecutedEvent(BaseEvent[None]):
    """Emitted when a copied trade filled, fully or partially.

    Handled by ExecutionNotifier to send notifications.
    """

    record_id: str
    tracked_wallet: str
    asset: str
    intent: Literal["OPEN", "REDUCE", "CLOSE"]
    state: str
    """ExecutionState value (FILLED, or the state that ended a partial fill)."""
    target: float
    filled_tokens: float
    filled_usd: float
    title: str | None = None
    outcome: str | None = None


class CopyTradeFailedEvent(BaseEvent[None]):
    """Emitted when a copied trade was skipped or aborted without any fill."""

    record_id: str
    tracked_wallet: str
    asset: str
    intent: Literal["OPEN", "REDUCE", "CLOSE"] | None = None
    reason: str
    """Skip reason or terminal ExecutionState value (ABORT_FUNDS, EXHAUSTED, ...)."""
    error_message: str | None = None
    error_type: str | None = None
    """Execution error class for an abort (NoLiquidityError, SlippageExceededError, ...); None for skips."""
    attempts: int = 0
    title: str | None = None


class PositionResolvedEvent(BaseEvent[None]):
    """Emitted once per resolved position handled by the resolver (sold, redeemed or failed)."""

    asset: str
    condition_id: str
    status: Literal["RESOLVED_WIN", "RESOLVED_LOSS"]
    method: Literal["SOLD", "REDEEMED", "FAILED"]
    tokens: float
    proceeds_usd: float
    reason: str | None = None
    tx_hash: str | None = None
    title: str | None = None
