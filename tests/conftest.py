# -*- coding: utf-8 -*-
"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from uuid import uuid4

import pytest

from copy_trade_engine.config import Settings
from copy_trade_engine.models.copy_strategy import CopyStrategy, CopyStrategyConfig
from copy_trade_engine.models.position import Position
from copy_trade_engine.models.trade_record import TradeIntentRecord
from copy_trade_engine.persistence.repositories.in_memory import InMemoryTradeRecordRepository


class FakeEventBus:
    """Minimal event bus fake for asserting dispatched events (dispatch is awaitable)."""

    def __init__(self) -> None:
        self.dispatched: list[Any] = []

    async def dispatch(self, event: Any) -> Any:
        self.dispatched.append(event)
        return event

    def of_type(self, event_type: type) -> list[Any]:
        return [e for e in self.dispatched if isinstance(e, event_type)]


@pytest.fixture
def wallet() -> str:
    """Default tracked (trader) wallet used by tests."""
    return "0x2d27b6e21b3d4d7c9a43fdf58f12345678907706"


@pytest.fixture
def follower() -> str:
    """Follower proxy wallet (POLYMARKET__FUNDER)."""
    return "0x9f1e2d3c4b5a69788796a5b4c3d2e1f001122334"


@pytest.fixture
def asset() -> str:
    """Default asset/token id used by tests."""
    return "1234567890123456789012345678901234567890123456789012345678901234"


@pytest.fixture
def condition_id() -> str:
    return "0x" + "ab" * 32


@pytest.fixture
def settings_factory(follower: str) -> Callable[..., Settings]:
    """Build Settings with per-section overrides, e.g. settings_factory(execution={"retry_limit": 2})."""

    def _build(**sections: dict[str, Any]) -> Settings:
        polymarket = {"funder": follower, **sections.pop("polymarket", {})}
        return Settings(polymarket=polymarket, **sections)

    return _build


@pytest.fixture
def settings(settings_factory: Callable[..., Settings]) -> Settings:
    return settings_factory()


@pytest.fixture
def strategy_config() -> CopyStrategyConfig:
    """PERCENTAGE 10%, max $100, min $1 (no position or daily limits)."""
    return CopyStrategyConfig(
        strategy=CopyStrategy.PERCENTAGE,
        copy_size=10.0,
        max_order_size_usd=100.0,
        min_order_size_usd=1.0,
    )


@pytest.fixture
def trade_record_factory(wallet: str, asset: str, condition_id: str) -> Callable[..., TradeIntentRecord]:
    """Build a pending TradeIntentRecord with sensible defaults and easy overrides."""

    def _build(**overrides: Any) -> TradeIntentRecord:
        values: dict[str, Any] = {
            "id": uuid4(),
            "key": f"tx:0x{uuid4().hex}:{asset}:BUY",
            "trader_wallet": wallet,
            "side": "BUY",
            "asset": asset,
            "condition_id": condition_id,
            "size": 200.0,
            "usdc_size": 100.0,
            "price": 0.5,
            "timestamp": 1_760_000_000,
        }
        values.update(overrides)
        return TradeIntentRecord(**values)

    return _build


@pytest.fixture
def position_factory(asset: str, condition_id: str) -> Callable[..., Position]:
    def _build(**overrides: Any) -> Position:
        values: dict[str, Any] = {
            "asset": asset,
            "condition_id": condition_id,
            "size": 10.0,
            "avg_price": 0.5,
            "cur_price": 0.5,
            "current_value": 5.0,
            "redeemable": False,
            "title": "Will it rain?",
            "outcome": "Yes",
        }
        values.update(overrides)
        return Position(**values)

    return _build


@pytest.fixture
def trade_record_repo() -> InMemoryTradeRecordRepository:
    """Fresh in-memory trade record repository per test."""
    return InMemoryTradeRecordRepository()


@pytest.fixture
def fake_event_bus() -> FakeEventBus:
    return FakeEventBus()
