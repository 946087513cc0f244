# -*- coding: utf-8 -*-
"""Unit tests for TradeExecutorService (pending record processing)."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import UTC, datetime, timedelta, timezone
from typing import Any, Optional
from unittest.mock import AsyncMock

import pytest

from copy_trade_engine.events.orders import CopyTradeExecutedEvent, CopyTradeFailedEvent
from copy_trade_engine.exceptions import MissingRequiredConfigError
from copy_trade_engine.services.copy_trading.trade_executor_service import (
    TradeExecutorService,
    utc_day_start,
)
from copy_trade_engine.services.copy_trading.trade_sizing import TradeSizer
from copy_trade_engine.services.order_execution.dto import ExecutionOutcome
from copy_trade_engine.services.order_execution.execution_state import ExecutionState
from copy_trade_engine.services.portfolio import PortfolioSnapshot


class _FakePortfolio:
    """Returns fixed snapshots per wallet (cash only when requested)."""

    def __init__(self, snapshots: dict[str, PortfolioSnapshot]) -> None:
        self._snapshots = {w.lower(): s for w, s in snapshots.items()}
        self.calls: list[tuple[str, bool]] = []

    async def snapshot(self, wallet: str, *, include_cash: bool = False) -> PortfolioSnapshot:
        self.calls.append((wallet, include_cash))
        snapshot = self._snapshots.get(wallet.lower(), PortfolioSnapshot(wallet=wallet))
        return snapshot if include_cash else replace(snapshot, cash_usdc=None)


def _outcome(
    state: ExecutionState,
    *,
    asset: str,
    side: str = "BUY",
    target: float = 10.0,
    filled: float = 0.0,
    tokens: float = 0.0,
    fills: int = 0,
    attempts: int = 0,
    reason: Optional[str] = None,
) -> ExecutionOutcome:
    return ExecutionOutcome(
        asset=asset,
        side=side,  # type: ignore[arg-type]
        target=target,
        state=state,
        filled=filled,
        tokens=tokens,
        notional_usd=filled if side == "BUY" else tokens * 0.5,
        attempts=attempts,
        fills=fills,
        book_available=True,
        reason=reason,
    )


@pytest.fixture
def portfolio(follower: str, wallet: str) -> _FakePortfolio:
    return _FakePortfolio(
        {
            follower: PortfolioSnapshot(wallet=follower, cash_usdc=1000.0),
            wallet: PortfolioSnapshot(wallet=wallet),
        }
    )


@pytest.fixture
def executor() -> Any:
    mock = AsyncMock()
    mock.execute = AsyncMock()
    return mock


@pytest.fixture
def make_service(settings, strategy_config, trade_record_repo, portfolio, executor, fake_event_bus):
    def _build(*, settings_override: Any = None, config: Any = None) -> TradeExecutorService:
        s = settings_override or settings
        return TradeExecutorService(
            s,
            trade_record_repo,
            portfolio,  # type: ignore[arg-type]
            executor,
            TradeSizer(s, config or strategy_config),
            fake_event_bus,
        )

    return _build


async def test_filled_record_is_marked_and_reported(
    make_service, trade_record_repo, trade_record_factory, executor, fake_event_bus, asset
) -> None:
    record = trade_record_factory(usdc_size=100.0, price=0.5)
    await trade_record_repo.add(record)
    executor.execute.return_value = _outcome(
        ExecutionState.FILLED, asset=asset, filled=10.0, tokens=20.0, fills=1
    )

    outcome = await make_service().process_record(record)

    assert outcome is not None and outcome.is_filled
    executor.execute.assert_awaited_once_with(
        asset, "BUY", pytest.approx(10.0), min_size=1.0, retry_limit=3, reference_price=0.5
    )
    stored = await trade_record_repo.get(record.id)
    assert stored.processed is True
    assert stored.attempts == 0
    assert stored.filled_usd == pytest.approx(10.0)

    events = fake_event_bus.of_type(CopyTradeExecutedEvent)
    assert len(events) == 1
    assert events[0].intent == "OPEN"
    assert events[0].state == "FILLED"
    assert events[0].filled_tokens == pytest.approx(20.0)


async def test_exhausted_record_stores_retry_limit(
    make_service, trade_record_repo, trade_record_factory, executor, fake_event_bus, asset
) -> None:
    record = trade_record_factory()
    await trade_record_repo.add(record)
    executor.execute.return_value = _outcome(
        ExecutionState.EXHAUSTED, asset=asset, attempts=3, reason="FOK order not filled"
    )

    await make_service().process_record(record)

    stored = await trade_record_repo.get(record.id)
    assert stored.processed is True
    assert stored.attempts == 3
    assert await trade_record_repo.list_pending(3) == []

    failed = fake_event_bus.of_type(CopyTradeFailedEvent)
    assert failed[0].reason == "EXHAUSTED"
    assert failed[0].error_message == "FOK order not filled"
    assert failed[0].attempts == 3
    assert failed[0].error_type == "TransientExecutionError"


async def test_liquidity_abort_is_processed_without_attempts(
    make_service, trade_record_repo, trade_record_factory, executor, fake_event_bus, asset
) -> None:
    record = trade_record_factory()
    await trade_record_repo.add(record)
    executor.execute.return_value = _outcome(
        ExecutionState.ABORT_LIQUIDITY, asset=asset, reason="no asks in order book"
    )

    await make_service().process_record(record)

    stored = await trade_record_repo.get(record.id)
    assert stored.processed is True
    assert stored.attempts == 0
    assert fake_event_bus.of_type(CopyTradeFailedEvent)[0].error_type == "NoLiquidityError"


async def test_partial_fill_reports_executed(
    make_service, trade_record_repo, trade_record_factory, executor, fake_event_bus, asset
) -> None:
    record = trade_record_factory()
    await trade_record_repo.add(record)
    executor.execute.return_value = _outcome(
        ExecutionState.ABORT_SLIPPAGE, asset=asset, filled=4.0, tokens=8.0, fills=1
    )

    await make_service().process_record(record)

    events = fake_event_bus.of_type(CopyTradeExecutedEvent)
    assert events[0].state == "ABORT_SLIPPAGE"
    assert fake_event_bus.of_type(CopyTradeFailedEvent) == []


async def test_skipped_plan_is_marked_without_execution(
    make_service, trade_record_repo, trade_record_factory, executor, fake_event_bus
) -> None:
    record = trade_record_factory(usdc_size=5.0)
    await trade_record_repo.add(record)

    outcome = await make_service().process_record(record)

    assert outcome is None
    executor.execute.assert_not_awaited()
    stored = await trade_record_repo.get(record.id)
    assert stored.processed is True
    assert fake_event_bus.of_type(CopyTradeFailedEvent)[0].reason == "below_minimum"
    assert fake_event_bus.of_type(CopyTradeFailedEvent)[0].error_type is None


async def test_already_processed_record_is_not_resubmitted(
    make_service, trade_record_repo, trade_record_factory, executor, fake_event_bus
) -> None:
    record = trade_record_factory()
    await trade_record_repo.add(record)
    await trade_record_repo.mark_processed(record.id, attempts=0)

    outcome = await make_service().process_record(record)

    assert outcome is None
    executor.execute.assert_not_awaited()
    assert fake_event_bus.dispatched == []


async def test_failing_record_is_retried_until_the_retry_limit(
    make_service, trade_record_repo, trade_record_factory, executor, asset
) -> None:
    first = trade_record_factory(timestamp=1)
    second = trade_record_factory(timestamp=2)
    await trade_record_repo.add(second)
    await trade_record_repo.add(first)
    executor.execute.side_effect = [
        RuntimeError("network down"),
        _outcome(ExecutionState.FILLED, asset=asset, filled=10.0, tokens=20.0, fills=1),
    ]
    service = make_service()

    handled = await service.process_pending()

    assert handled == 1
    assert (await trade_record_repo.get(second.id)).processed is True
    stored = await trade_record_repo.get(first.id)
    assert stored.processed is False
    assert stored.attempts == 1
    assert [r.id for r in await trade_record_repo.list_pending(3)] == [first.id]

    executor.execute.side_effect = RuntimeError("network down")
    for _ in range(10):
        await service.process_pending()

    # 1 failure + 1 fill in the first pass, then 2 more failures before the limit
    assert executor.execute.await_count == 4
    assert (await trade_record_repo.get(first.id)).attempts == 3
    assert await trade_record_repo.list_pending(3) == []


async def test_missing_funder_propagates(
    make_service, settings_factory, trade_record_repo, trade_record_factory
) -> None:
    await trade_record_repo.add(trade_record_factory())
    service = make_service(settings_override=settings_factory(polymarket={"funder": None}))

    with pytest.raises(MissingRequiredConfigError):
        await service.process_pending()


async def test_daily_volume_counts_todays_buys(
    make_service, strategy_config, trade_record_repo, trade_record_factory, executor, asset
) -> None:
    earlier = trade_record_factory()
    await trade_record_repo.add(earlier)
    await trade_record_repo.mark_processed(earlier.id, attempts=0, filled_usd=15.0)
    record = trade_record_factory(usdc_size=100.0)
    await trade_record_repo.add(record)
    executor.execute.return_value = _outcome(
        ExecutionState.FILLED, asset=asset, filled=5.0, tokens=10.0, fills=1
    )
    config = replace(strategy_config, max_daily_volume_usd=20.0)

    await make_service(config=config).process_record(record)

    args = executor.execute.await_args
    assert args.args[2] == pytest.approx(5.0)


async def test_sell_uses_follower_position(
    make_service, trade_record_repo, trade_record_factory, portfolio, position_factory, executor, follower, asset
) -> None:
    portfolio._snapshots[follower.lower()] = PortfolioSnapshot(
        wallet=follower, positions=[position_factory(size=40.0)], cash_usdc=10.0
    )
    record = trade_record_factory(side="SELL", size=50.0)
    await trade_record_repo.add(record)
    executor.execute.return_value = _outcome(
        ExecutionState.FILLED, asset=asset, side="SELL", target=40.0, filled=40.0, tokens=40.0, fills=1
    )

    await make_service().process_record(record)

    args = executor.execute.await_args
    assert args.args[1] == "SELL"
    assert args.args[2] == pytest.approx(40.0)
    assert args.kwargs["reference_price"] is None


async def test_run_processes_until_stopped(
    make_service, trade_record_repo, trade_record_factory, executor, asset
) -> None:
    record = trade_record_factory()
    await trade_record_repo.add(record)
    executor.execute.return_value = _outcome(
        ExecutionState.FILLED, asset=asset, filled=10.0, tokens=20.0, fills=1
    )
    stop_event = asyncio.Event()

    task = asyncio.create_task(make_service().run(stop_event))
    await asyncio.sleep(0.05)
    stop_event.set()
    await asyncio.wait_for(task, timeout=2.0)

    assert (await trade_record_repo.get(record.id)).processed is True


def test_utc_day_start() -> None:
    now = datetime(2026, 3, 4, 1, 30, tzinfo=timezone(timedelta(hours=5)))
    assert utc_day_start(now) == datetime(2026, 3, 3, 0, 0, tzinfo=UTC)
