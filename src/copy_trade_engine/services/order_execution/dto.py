"""Data transfer objects for order execution."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

from copy_trade_engine.exceptions import (
    InsufficientFundsOrAllowanceError,
    NoLiquidityError,
    OrderExecutionError,
    SlippageExceededError,
    TransientExecutionError,
)
from copy_trade_engine.services.order_execution.execution_state import (
    ExecutionProgress,
    ExecutionState,
)


@dataclass
class OrderResponse:
    """Response from the PostOrder API."""

    success: bool = False
    error_msg: str | None = None
    order_id: str | None = None
    transactions_hashes: list[str] = field(default_factory=list)
    status: str | None = None
    taking_amount: str | None = None
    making_amount: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_response(cls, response: dict[str, Any] | None) -> OrderResponse:
        if response is None:
            return cls()

        return cls(
            success=response.get("success", False) is True,
            error_msg=response.get("errorMsg", None),
            order_id=response.get("orderID", None),
            transactions_hashes=response.get("transactionsHashes", None) or [],
            status=response.get("status", None),
            taking_amount=response.get("takingAmount", None),
            making_amount=response.get("makingAmount", None),
        )


_STATE_ERRORS: dict[ExecutionState, type[OrderExecutionError]] = {
    ExecutionState.ABORT_LIQUIDITY: NoLiquidityError,
    ExecutionState.ABORT_SLIPPAGE: SlippageExceededError,
    ExecutionState.ABORT_FUNDS: InsufficientFundsOrAllowanceError,
    ExecutionState.EXHAUSTED: TransientExecutionError,
}


@dataclass(frozen=True)
class ExecutionOutcome:
    """Terminal result of one execution run by OrderBookExecutor."""

    asset: str
    side: Literal["BUY", "SELL"]
    target: float
    state: ExecutionState
    filled: float
    """Amount filled in target units (USD for buys, tokens for sells)."""
    tokens: float
    notional_usd: float
    attempts: int
    fills: int
    book_available: bool
    reason: str | None = None

    @classmethod
    def from_progress(
        cls,
        asset: str,
        side: Literal["BUY", "SELL"],
        progress: ExecutionProgress,
    ) -> ExecutionOutcome:
        return cls(
            asset=asset,
            side=side,
            target=progress.target,
            state=progress.state,
            filled=progress.filled,
            tokens=progress.tokens,
            notional_usd=progress.notional_usd,
            attempts=progress.attempts,
            fills=progress.fills,
            book_available=progress.book_available,
            reason=progress.reason,
        )

    @property
    def is_filled(self) -> bool:
        return self.state == ExecutionState.FILLED

    @property
    def exhausted(self) -> bool:
        """True when the record must not be retried automatically (funds or retry limit)."""
        return self.state in (ExecutionState.ABORT_FUNDS, ExecutionState.EXHAUSTED)

    def error(self) -> OrderExecutionError | None:
        """Exception matching a non-filled terminal state, for callers that prefer raising."""
        exc_type = _STATE_ERRORS.get(self.state)
        if exc_type is None:
            return None
        return exc_type(self.reason or self.state.value, asset=self.asset)
