# -*- coding: utf-8 -*-
"""Order execution state machine.

ExecutionProgress is an immutable snapshot of one execution; the functions below
are pure transitions returning a new snapshot. The executor owns the I/O and only
feeds observations (fills, failures, book conditions) into these transitions.

    ATTEMPTING --fill, remaining >= min--> ATTEMPTING
    ATTEMPTING --fill, remaining < min---> FILLED
    ATTEMPTING --failure---------------> RETRY | EXHAUSTED | ABORT_FUNDS
    RETRY      --(same as ATTEMPTING)
    any active --empty/unreachable book-> ABORT_LIQUIDITY
    any active --ask beyond tolerance---> ABORT_SLIPPAGE
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional

FUNDS_ERROR_MARKERS: tuple[str, ...] = ("not enough balance", "allowance")


class ExecutionState(str, Enum):
    """States of a single trade execution."""

    ATTEMPTING = "ATTEMPTING"
    RETRY = "RETRY"
    FILLED = "FILLED"
    ABORT_LIQUIDITY = "ABORT_LIQUIDITY"
    ABORT_SLIPPAGE = "ABORT_SLIPPAGE"
    ABORT_FUNDS = "ABORT_FUNDS"
    EXHAUSTED = "EXHAUSTED"
    """Retry limit reached without a funds/allowance signal."""
    BELOW_MINIMUM = "BELOW_MINIMUM"
    """Target below the minimum tradable size; nothing was submitted."""


ACTIVE_STATES = frozenset({ExecutionState.ATTEMPTING, ExecutionState.RETRY})


@dataclass(frozen=True, slots=True)
class ExecutionProgress:
    """Immutable progress of one execution. Amounts are in target units
    (USD for buys, tokens for sells) unless named otherwise."""

    target: float
    remaining: float
    min_size: float
    retry_limit: int
    state: ExecutionState = ExecutionState.ATTEMPTING
    attempts: int = 0
    """Consecutive failed submissions; reset by every fill."""
    filled: float = 0.0
    tokens: float = 0.0
    notional_usd: float = 0.0
    fills: int = 0
    reason: Optional[str] = None
    book_available: bool = True
    """False once the book could not be fetched or had no levels on the needed side."""

    @classmethod
    def start(cls, target: float, *, min_size: float, retry_limit: int) -> ExecutionProgress:
        """Initial progress; BELOW_MINIMUM right away when target < min_size."""
        progress = cls(
            target=target,
            remaining=max(0.0, target),
            min_size=min_size,
            retry_limit=retry_limit,
        )
        if progress.remaining < min_size:
            return replace(
                progress,
                state=ExecutionState.BELOW_MINIMUM,
                reason=f"target {target:.4f} below minimum {min_size}",
            )
        return progress

    @property
    def is_active(self) -> bool:
        return self.state in ACTIVE_STATES

    @property
    def is_terminal(self) -> bool:
        return not self.is_active


def record_fill(
    progress: ExecutionProgress,
    *,
    amount: float,
    tokens: float,
    notional_usd: float,
) -> ExecutionProgress:
    """A submission filled `amount` (target units). Resets the failure counter."""
    remaining = max(0.0, progress.remaining - amount)
    state = ExecutionState.FILLED if remaining < progress.min_size else ExecutionState.ATTEMPTING
    return replace(
        progress,
        state=state,
        remaining=remaining,
        attempts=0,
        filled=progress.filled + amount,
        tokens=progress.tokens + tokens,
        notional_usd=progress.notional_usd + notional_usd,
        fills=progress.fills + 1,
        reason=None,
    )


def record_failure(progress: ExecutionProgress, error_message: Optional[str]) -> ExecutionProgress:
    """A submission failed. Funds/allowance errors are terminal; others count toward the retry limit."""
    message = error_message or "unknown order error"
    if is_funds_or_allowance_error(message):
        return replace(progress, state=ExecutionState.ABORT_FUNDS, reason=message)
    attempts = progress.attempts + 1
    state = ExecutionState.EXHAUSTED if attempts >= progress.retry_limit else ExecutionState.RETRY
    return replace(progress, state=state, attempts=attempts, reason=message)


def abort_liquidity(
    progress: ExecutionProgress,
    reason: str,
    *,
    book_available: bool,
) -> ExecutionProgress:
    """Stop: no usable liquidity on the needed side."""
    return replace(
        progress,
        state=ExecutionState.ABORT_LIQUIDITY,
        reason=reason,
        book_available=book_available,
    )


def abort_slippage(progress: ExecutionProgress, reason: str) -> ExecutionProgress:
    """Stop: the price moved too far from the copied price."""
    return replace(progress, state=ExecutionState.ABORT_SLIPPAGE, reason=reason)


def is_funds_or_allowance_error(message: Optional[str]) -> bool:
    """True if message signals missing balance or allowance (case-insensitive)."""
    if not message:
        return False
    lowered = message.lower()
    return any(marker in lowered for marker in FUNDS_ERROR_MARKERS)


# --- Error payload extraction ---


def _non_empty(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value.strip() else None


def _plain_string(payload: Any) -> Optional[str]:
    return _non_empty(payload)


def _nested_error(payload: Any) -> Optional[str]:
    if not isinstance(payload, Mapping):
        return None
    error = payload.get("error")
    if isinstance(error, Mapping):
        return _non_empty(error.get("error")) or _non_empty(error.get("message"))
    return _non_empty(error)


def _flat_field(name: str) -> Callable[[Any], Optional[str]]:
    def _match(payload: Any) -> Optional[str]:
        if not isinstance(payload, Mapping):
            return None
        return _non_empty(payload.get(name))

    return _match


_ERROR_MATCHERS: tuple[Callable[[Any], Optional[str]], ...] = (
    _plain_string,
    _nested_error,
    _flat_field("errorMsg"),
    _flat_field("message"),
)


def extract_order_error(payload: Any) -> Optional[str]:
    """Best-effort message from a heterogeneous order error payload.

    Tries in order: plain string, nested `error` (string or object with
    `error`/`message`), flat `errorMsg`, flat `message`. Returns None if no
    shape matches.
    """
    for matcher in _ERROR_MATCHERS:
        message = matcher(payload)
        if message is not None:
            return message
    return None
