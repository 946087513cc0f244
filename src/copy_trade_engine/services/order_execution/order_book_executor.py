# -*- coding: utf-8 -*-
"""Order book executor: fills a target size against the live CLOB book.

Each iteration re-fetches the book, takes the best level on the needed side,
submits a fill-or-kill market order for min(remaining, level size) at that
price and feeds the result into the execution state machine.
"""

from __future__ import annotations

import structlog
from typing import TYPE_CHECKING, Any, Callable, Literal, Optional
from structlog.contextvars import bound_contextvars

from py_clob_client.clob_types import MarketOrderArgs, OrderType  # type: ignore[import-untyped]
from py_clob_client.order_builder.constants import BUY, SELL  # type: ignore[import-untyped]
from py_clob_client.exceptions import PolyApiException  # type: ignore[import-untyped]

from copy_trade_engine.events.orders import OrderPlacedEvent
from copy_trade_engine.models.order_book import OrderBookSnapshot
from copy_trade_engine.services.order_execution.dto import ExecutionOutcome, OrderResponse
from copy_trade_engine.services.order_execution.execution_state import (
    ExecutionProgress,
    abort_liquidity,
    abort_slippage,
    extract_order_error,
    record_failure,
    record_fill,
)

if TYPE_CHECKING:
    from bubus import EventBus  # type: ignore[import-untyped]
    from copy_trade_engine.clients import AsyncClobClient
    from copy_trade_engine.config import Settings

Side = Literal["BUY", "SELL"]


class OrderBookExecutor:
    """Runs the fill loop for one trade at a time (buys sized in USD, sells in tokens)."""

    _event_bus: Optional["EventBus"]

    def __init__(
        self,
        settings: "Settings",
        clob_client: "AsyncClobClient",
        event_bus: Optional[Any] = None,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the executor.

        Args:
            settings: Application settings (uses settings.execution).
            clob_client: Async CLOB client for order books and order submission.
            event_bus: Optional bubus EventBus; receives one OrderPlacedEvent per submission.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._settings = settings
        self._client = clob_client
        self._event_bus = event_bus
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def execute(
        self,
        asset: str,
        side: Side,
        target: float,
        *,
        min_size: float,
        retry_limit: int,
        reference_price: Optional[float] = None,
        slippage_tolerance: Optional[float] = None,
    ) -> ExecutionOutcome:
        """Fill `target` on `side` until filled, out of retries or aborted.

        Args:
            asset: CLOB token id.
            side: "BUY" (target in USD) or "SELL" (target in tokens).
            target: Amount to fill.
            min_size: Minimum tradable amount in target units.
            retry_limit: Consecutive failed submissions allowed before giving up.
            reference_price: Copied trader price; enables the slippage check on buys.
            slippage_tolerance: Defaults to settings.execution.slippage_tolerance.

        Returns:
            ExecutionOutcome with the terminal state and filled amounts.
        """
        asset = asset.strip()
        tolerance = (
            slippage_tolerance
            if slippage_tolerance is not None
            else self._settings.execution.slippage_tolerance
        )
        progress = ExecutionProgress.start(target, min_size=min_size, retry_limit=retry_limit)

        with bound_contextvars(execution_token_id=asset, execution_side=side):
            while progress.is_active:
                progress = await self._step(asset, side, progress, reference_price, tolerance)

            outcome = ExecutionOutcome.from_progress(asset, side, progress)
            self._logger.info(
                "execution_finished",
                state=outcome.state.value,
                target=target,
                filled=outcome.filled,
                tokens=outcome.tokens,
                notional_usd=outcome.notional_usd,
                fills=outcome.fills,
                attempts=outcome.attempts,
                reason=outcome.reason,
            )
            return outcome

    async def _step(
        self,
        asset: str,
        side: Side,
        progress: ExecutionProgress,
        reference_price: Optional[float],
        tolerance: float,
    ) -> ExecutionProgress:
        book = await self._fetch_book(asset)
        if book is None:
            return abort_liquidity(progress, "order book unavailable", book_available=False)

        level = book.best_ask() if side == BUY else book.best_bid()
        if level is None:
            book_side = "asks" if side == BUY else "bids"
            self._logger.warning("execution_empty_book_side", book_side=book_side)
            return abort_liquidity(progress, f"no {book_side} in order book", book_available=False)

        if side == BUY and reference_price is not None and level.price - tolerance > reference_price:
            self._logger.warning(
                "execution_slippage_exceeded",
                best_ask=level.price,
                reference_price=reference_price,
                tolerance=tolerance,
            )
            return abort_slippage(
                progress,
                f"best ask {level.price} exceeds copied price {reference_price} + {tolerance}",
            )

        level_capacity = level.notional if side == BUY else level.size
        chunk = min(progress.remaining, level_capacity)
        if chunk < progress.min_size:
            return abort_liquidity(
                progress,
                f"best level too thin ({chunk:.4f} < {progress.min_size})",
                book_available=True,
            )

        response, error = await self._submit(asset, side, chunk, level.price)
        if response is not None and response.success:
            tokens = chunk / level.price if side == BUY else chunk
            notional = chunk if side == BUY else chunk * level.price
            return record_fill(progress, amount=chunk, tokens=tokens, notional_usd=notional)

        failed = record_failure(progress, error)
        self._logger.warning(
            "execution_attempt_failed",
            attempt=failed.attempts,
            retry_limit=failed.retry_limit,
            state=failed.state.value,
            error_message=failed.reason,
        )
        return failed

    async def _fetch_book(self, asset: str) -> Optional[OrderBookSnapshot]:
        """Fetch a fresh book; None when it cannot be fetched (e.g. market closed)."""
        try:
            summary = await self._client.get_order_book(asset)
        except Exception as e:
            self._logger.warning(
                "execution_order_book_unavailable",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return None
        return OrderBookSnapshot.from_summary(asset, summary)

    async def _submit(
        self,
        asset: str,
        side: Side,
        amount: float,
        price: float,
    ) -> tuple[Optional[OrderResponse], Optional[str]]:
        """Create and post one FOK order. Returns (response, error message)."""
        response: Optional[OrderResponse] = None
        error: Optional[str] = None
        try:
            signed = await self._client.create_market_order(
                order_args=MarketOrderArgs(
                    token_id=asset,
                    amount=float(amount),
                    side=BUY if side == BUY else SELL,
                    price=price,
                    order_type=OrderType.FOK,
                )
            )
            raw = await self._client.post_order(signed, OrderType.FOK)
            response = OrderResponse.from_response(raw)
            if not response.success:
                error = extract_order_error(raw) or "order not filled"
            self._logger.info(
                "execution_order_posted",
                amount=amount,
                price=price,
                success=response.success,
                order_id=response.order_id,
                status=response.status,
                error_message=error,
            )
        except PolyApiException as e:
            error = extract_order_error(getattr(e, "error_msg", None)) or str(e)
            self._logger.warning(
                "execution_order_rejected",
                amount=amount,
                price=price,
                error_type=type(e).__name__,
                error_message=error,
                status_code=getattr(e, "status_code", None),
            )
        except Exception as e:
            error = str(e) or type(e).__name__
            self._logger.exception(
                "execution_order_exception",
                amount=amount,
                price=price,
                error_type=type(e).__name__,
                error_message=str(e),
            )
        await self._dispatch_order_placed(asset, side, amount, price, response, error)
        return response, error

    async def _dispatch_order_placed(
        self,
        asset: str,
        side: Side,
        amount: float,
        price: float,
        response: Optional[OrderResponse],
        error: Optional[str],
    ) -> None:
        """Emit OrderPlacedEvent on the event bus and wait until processing completes."""
        if self._event_bus is None:
            return
        event = OrderPlacedEvent(
            token_id=asset,
            side=side,
            amount=amount,
            amount_kind="usdc" if side == BUY else "shares",
            price=price,
            success=response is not None and response.success,
            order_id=response.order_id if response else None,
            error_msg=error,
            status=response.status if response else None,
            response_summary=response.to_dict() if response else None,
        )
        dispatched = self._event_bus.dispatch(event)
        await dispatched
