# -*- coding: utf-8 -*-
"""TradeExecutorService: copies pending trader trades into the follower account.

Every pass reads pending TradeIntentRecords, sizes each one with TradeSizer, runs
OrderBookExecutor and writes exactly one terminal update back to the repository.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog
from structlog.contextvars import bound_contextvars

from copy_trade_engine.events.orders.copy_trade_events import (
    CopyTradeExecutedEvent,
    CopyTradeFailedEvent,
)
from copy_trade_engine.exceptions import MissingRequiredConfigError
from copy_trade_engine.utils.validation import mask_address

if TYPE_CHECKING:
    from bubus import BaseEvent, EventBus  # type: ignore[import-untyped]

    from copy_trade_engine.config import Settings
    from copy_trade_engine.models.trade_record import TradeIntentRecord
    from copy_trade_engine.persistence.repositories.interfaces.trade_record_repository import (
        ITradeRecordRepository,
    )
    from copy_trade_engine.services.copy_trading.trade_sizing import TradePlan, TradeSizer
    from copy_trade_engine.services.order_execution import ExecutionOutcome, OrderBookExecutor
    from copy_trade_engine.services.portfolio import PortfolioService


def utc_day_start(now: Optional[datetime] = None) -> datetime:
    """Midnight UTC of the day containing `now` (default: current time)."""
    now = now or datetime.now(UTC)
    return now.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)


class TradeExecutorService:
    """Poll loop over pending trade records; one sequential execution at a time."""

    _event_bus: Optional["EventBus"] = None

    def __init__(
        self,
        settings: "Settings",
        trade_record_repository: "ITradeRecordRepository",
        portfolio_service: "PortfolioService",
        executor: "OrderBookExecutor",
        sizer: "TradeSizer",
        event_bus: Optional[Any] = None,
        *,
        wallet_lock: Optional[asyncio.Lock] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the service.

        Args:
            settings: Application settings (uses settings.execution and settings.polymarket.funder).
            trade_record_repository: Source of pending records and sink of terminal updates.
            portfolio_service: Fresh follower/trader positions and follower USDC balance.
            executor: Order book executor.
            sizer: Copy sizing policy.
            event_bus: Optional; receives CopyTradeExecutedEvent / CopyTradeFailedEvent.
            wallet_lock: Serializes order activity on the follower wallet; share it with
                PositionResolutionService so their orders never overlap.
            get_logger: Logger factory.
            logger_name: Optional logger name.
        """
        self._settings = settings
        self._repo = trade_record_repository
        self._portfolio = portfolio_service
        self._executor = executor
        self._sizer = sizer
        self._event_bus = event_bus
        self._wallet_lock = wallet_lock if wallet_lock is not None else asyncio.Lock()
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _follower_wallet(self) -> str:
        funder = self._settings.polymarket.funder
        if not funder:
            raise MissingRequiredConfigError("POLYMARKET__FUNDER")
        return funder.strip()

    async def run(self, stop_event: asyncio.Event) -> None:
        """Process pending records every EXECUTION__POLL_SECONDS until stop_event is set.

        A failing pass is logged and the loop continues; the stop event is only
        checked between passes.
        """
        poll_seconds = self._settings.execution.poll_seconds
        self._logger.info(
            "trade_executor_started",
            poll_seconds=poll_seconds,
            retry_limit=self._settings.execution.retry_limit,
            sizing_mode=self._settings.execution.sizing_mode,
            strategy=self._sizer.strategy_config.strategy.value,
        )
        while not stop_event.is_set():
            try:
                await self.process_pending()
            except Exception as e:
                self._logger.exception(
                    "trade_executor_pass_failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=poll_seconds)
            except asyncio.TimeoutError:
                pass
        self._logger.info("trade_executor_stopped")

    async def process_pending(self) -> int:
        """Execute every pending record once, oldest first. Returns how many were handled."""
        pending = await self._repo.list_pending(self._settings.execution.retry_limit)
        handled = 0
        for record in pending:
            try:
                await self.process_record(record)
                handled += 1
            except MissingRequiredConfigError:
                raise
            except Exception as e:
                # stays pending until attempts reaches EXECUTION__RETRY_LIMIT
                updated = await self._repo.record_failed_attempt(record.id)
                self._logger.exception(
                    "trade_executor_record_failed",
                    record_id=str(record.id),
                    asset=record.asset,
                    attempts=updated.attempts if updated else None,
                    retry_limit=self._settings.execution.retry_limit,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
        return handled

    async def process_record(self, record: "TradeIntentRecord") -> Optional["ExecutionOutcome"]:
        """Size and execute one record, then mark it processed.

        The wallet lock is held for the whole unit, from the fresh portfolio read
        to the terminal update.

        Returns:
            The execution outcome, or None when the record was skipped.
        """
        async with self._wallet_lock:
            return await self._process_record(record)

    async def _process_record(self, record: "TradeIntentRecord") -> Optional["ExecutionOutcome"]:
        current = await self._repo.get(record.id)
        if current is None or current.processed:
            self._logger.debug("trade_executor_record_already_processed", record_id=str(record.id))
            return None

        with bound_contextvars(
            record_id=str(current.id),
            tracked_wallet_masked=mask_address(current.trader_wallet),
            asset=current.asset,
            trade_side=current.side,
        ):
            plan = await self._plan(current)
            self._logger.info(
                "trade_executor_plan",
                intent=plan.intent.value,
                target=plan.target,
                skip_reason=plan.skip_reason,
                reasoning=plan.reasoning,
                trade_usdc_size=current.usdc_size,
                trade_price=current.price,
            )
            if not plan.should_execute:
                await self._repo.mark_processed(current.id, attempts=0)
                await self._dispatch(
                    CopyTradeFailedEvent(
                        record_id=str(current.id),
                        tracked_wallet=current.trader_wallet,
                        asset=current.asset,
                        intent=plan.intent.value,
                        reason=plan.skip_reason or "skipped",
                        error_message=plan.reasoning,
                        title=current.title,
                    )
                )
                return None

            retry_limit = self._settings.execution.retry_limit
            outcome = await self._executor.execute(
                current.asset,
                plan.side,
                plan.target,
                min_size=plan.min_size,
                retry_limit=retry_limit,
                reference_price=plan.reference_price,
            )
            attempts = retry_limit if outcome.exhausted else 0
            await self._repo.mark_processed(
                current.id,
                attempts=attempts,
                filled_usd=outcome.notional_usd,
            )
            await self._dispatch_outcome(current, plan, outcome)
            return outcome

    async def _plan(self, record: "TradeIntentRecord") -> "TradePlan":
        follower_wallet = self._follower_wallet()
        follower = await self._portfolio.snapshot(follower_wallet, include_cash=True)
        trader = await self._portfolio.snapshot(record.trader_wallet)

        daily_used = 0.0
        if record.side == "BUY" and self._sizer.strategy_config.max_daily_volume_usd:
            daily_used = await self._repo.sum_filled_usd_since(utc_day_start())

        return self._sizer.plan(
            record,
            follower_position=follower.position_for(record.asset),
            trader_position=trader.position_for(record.asset),
            follower_balance=follower.cash_usdc or 0.0,
            trader_balance=trader.positions_value,
            daily_volume_used=daily_used,
        )

    async def _dispatch_outcome(
        self,
        record: "TradeIntentRecord",
        plan: "TradePlan",
        outcome: "ExecutionOutcome",
    ) -> None:
        if outcome.fills > 0:
            event: "BaseEvent[None]" = CopyTradeExecutedEvent(
                record_id=str(record.id),
                tracked_wallet=record.trader_wallet,
                asset=record.asset,
                intent=plan.intent.value,
                state=outcome.state.value,
                target=outcome.target,
                filled_tokens=outcome.tokens,
                filled_usd=outcome.notional_usd,
                title=record.title,
                outcome=record.outcome,
            )
        else:
            error = outcome.error()
            error_type = type(error).__name__ if error else None
            self._logger.warning(
                "trade_executor_copy_failed",
                state=outcome.state.value,
                error_type=error_type,
                error_message=outcome.reason,
                attempts=outcome.attempts,
            )
            event = CopyTradeFailedEvent(
                record_id=str(record.id),
                tracked_wallet=record.trader_wallet,
                asset=record.asset,
                intent=plan.intent.value,
                reason=outcome.state.value,
                error_message=outcome.reason,
                error_type=error_type,
                attempts=outcome.attempts,
                title=record.title,
            )
        await self._dispatch(event)

    async def _dispatch(self, event: "BaseEvent[None]") -> None:
        if self._event_bus is None:
            return
        await self._event_bus.dispatch(event)
