# -*- coding: utf-8 -*-
"""Unit tests for ExecutionNotifier (event to notification mapping)."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable
from unittest.mock import Mock

import pytest

from copy_trade_engine.events.orders import (
    CopyTradeExecutedEvent,
    CopyTradeFailedEvent,
    PositionResolvedEvent,
)
from copy_trade_engine.services.notifications.execution_notifier import ExecutionNotifier, reason_label


class _SubscribingBus:
    """Records subscriptions keyed by event class name, like bubus' EventBus.handlers."""

    def __init__(self) -> None:
        self.handlers: dict[str, list[Callable[[Any], Any]]] = defaultdict(list)

    def on(self, event_type: type, handler: Callable[[Any], Any]) -> None:
        self.handlers[event_type.__name__].append(handler)

    def emit(self, event: Any) -> None:
        for handler in self.handlers[type(event).__name__]:
            handler(event)


@pytest.fixture
def bus() -> _SubscribingBus:
    return _SubscribingBus()


@pytest.fixture
def notification_service() -> Mock:
    return Mock()


@pytest.fixture
def notifier(notification_service, bus) -> ExecutionNotifier:
    n = ExecutionNotifier(notification_service, bus)
    n.start()
    return n


def _sent(notification_service: Mock):
    return notification_service.notify.call_args.args[0]


def test_executed_event(notifier, bus, notification_service, wallet, asset) -> None:
    bus.emit(
        CopyTradeExecutedEvent(
            record_id="r1",
            tracked_wallet=wallet,
            asset=asset,
            intent="OPEN",
            state="FILLED",
            target=10.0,
            filled_tokens=20.0,
            filled_usd=10.0,
        )
    )

    message = _sent(notification_service)
    assert message.event_type == "copy_trade_executed"
    assert message.message == "OPEN filled: 20.0000 tokens for $10.00"
    assert message.payload["filled_usd"] == 10.0


def test_partial_fill_message(notifier, bus, notification_service, wallet, asset) -> None:
    bus.emit(
        CopyTradeExecutedEvent(
            record_id="r1",
            tracked_wallet=wallet,
            asset=asset,
            intent="REDUCE",
            state="ABORT_LIQUIDITY",
            target=10.0,
            filled_tokens=4.0,
            filled_usd=2.0,
        )
    )

    assert _sent(notification_service).message.startswith("REDUCE partially filled")


def test_failed_event_uses_reason_label(notifier, bus, notification_service, wallet, asset) -> None:
    bus.emit(
        CopyTradeFailedEvent(
            record_id="r1",
            tracked_wallet=wallet,
            asset=asset,
            reason="ABORT_FUNDS",
            error_message="not enough balance / allowance",
        )
    )

    message = _sent(notification_service)
    assert message.event_type == "copy_trade_failed"
    assert message.message == "Insufficient balance or allowance"


@pytest.mark.parametrize(
    ("method", "reason", "expected"),
    [
        ("REDEEMED", None, "Redeemed 10.00 tokens for $10.00"),
        ("FAILED", "order book closed but market not yet redeemable",
         "Could not close position: order book closed but market not yet redeemable"),
    ],
)
def test_resolved_event(notifier, bus, notification_service, asset, condition_id, method, reason, expected) -> None:
    bus.emit(
        PositionResolvedEvent(
            asset=asset,
            condition_id=condition_id,
            status="RESOLVED_WIN",
            method=method,
            tokens=10.0,
            proceeds_usd=10.0,
            reason=reason,
        )
    )

    assert _sent(notification_service).message == expected


def test_stop_unsubscribes(notifier, bus, notification_service, wallet, asset) -> None:
    notifier.stop()

    bus.emit(
        CopyTradeFailedEvent(record_id="r1", tracked_wallet=wallet, asset=asset, reason="EXHAUSTED")
    )

    notification_service.notify.assert_not_called()


def test_reason_label_fallback() -> None:
    assert reason_label("daily_volume_exhausted") == "Daily volume limit reached"
    assert reason_label("something_new") == "Something new"
