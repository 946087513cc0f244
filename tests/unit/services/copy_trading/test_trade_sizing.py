# -*- coding: utf-8 -*-
"""Unit tests for TradeSizer and intent classification."""

from __future__ import annotations

from dataclasses import replace

import pytest

from copy_trade_engine.services.copy_trading.trade_sizing import (
    TradeIntent,
    TradeSizer,
    classify_intent,
)


def test_classify_intent(trade_record_factory, position_factory) -> None:
    buy = trade_record_factory(side="BUY")
    sell = trade_record_factory(side="SELL")

    assert classify_intent(buy, None) == TradeIntent.OPEN
    assert classify_intent(sell, position_factory(size=5.0)) == TradeIntent.REDUCE
    assert classify_intent(sell, position_factory(size=0.0)) == TradeIntent.CLOSE
    assert classify_intent(sell, None) == TradeIntent.CLOSE


def test_open_with_strategy(settings, strategy_config, trade_record_factory) -> None:
    sizer = TradeSizer(settings, strategy_config)

    plan = sizer.plan(
        trade_record_factory(usdc_size=100.0, price=0.5),
        follower_position=None,
        trader_position=None,
        follower_balance=1000.0,
        trader_balance=5000.0,
    )

    assert plan.intent == TradeIntent.OPEN
    assert plan.side == "BUY"
    assert plan.target == pytest.approx(10.0)
    assert plan.reference_price == 0.5
    assert plan.should_execute is True


def test_open_below_minimum_is_skipped(settings, strategy_config, trade_record_factory) -> None:
    plan = TradeSizer(settings, strategy_config).plan(
        trade_record_factory(usdc_size=5.0),
        follower_position=None,
        trader_position=None,
        follower_balance=1000.0,
        trader_balance=5000.0,
    )

    assert plan.skip_reason == "below_minimum"
    assert plan.target == 0.0
    assert plan.should_execute is False


def test_open_respects_position_limit_via_current_value(
    settings, strategy_config, trade_record_factory, position_factory
) -> None:
    config = replace(strategy_config, max_position_size_usd=50.0)

    plan = TradeSizer(settings, config).plan(
        trade_record_factory(usdc_size=100.0),
        follower_position=position_factory(current_value=45.0),
        trader_position=None,
        follower_balance=1000.0,
        trader_balance=5000.0,
    )

    assert 0 < plan.target <= 5.0


def test_open_capped_by_daily_volume(settings, strategy_config, trade_record_factory) -> None:
    config = replace(strategy_config, max_daily_volume_usd=20.0)

    plan = TradeSizer(settings, config).plan(
        trade_record_factory(usdc_size=100.0),
        follower_position=None,
        trader_position=None,
        follower_balance=1000.0,
        trader_balance=5000.0,
        daily_volume_used=15.0,
    )

    assert plan.target == pytest.approx(5.0)
    assert "daily volume" in plan.reasoning


def test_open_skipped_when_daily_volume_exhausted(settings, strategy_config, trade_record_factory) -> None:
    config = replace(strategy_config, max_daily_volume_usd=20.0)

    plan = TradeSizer(settings, config).plan(
        trade_record_factory(usdc_size=100.0),
        follower_position=None,
        trader_position=None,
        follower_balance=1000.0,
        trader_balance=5000.0,
        daily_volume_used=20.0,
    )

    assert plan.skip_reason == "daily_volume_exhausted"
    assert plan.target == 0.0


def test_open_proportional_uses_account_ratio(settings_factory, strategy_config, trade_record_factory) -> None:
    settings = settings_factory(execution={"sizing_mode": "proportional"})

    plan = TradeSizer(settings, strategy_config).plan(
        trade_record_factory(usdc_size=100.0),
        follower_position=None,
        trader_position=None,
        follower_balance=100.0,
        trader_balance=900.0,
    )

    assert plan.target == pytest.approx(10.0)


def test_open_proportional_multiplier_lifts_tiny_orders(
    settings_factory, strategy_config, trade_record_factory
) -> None:
    settings = settings_factory(
        execution={"sizing_mode": "proportional"},
        strategy={"trade_multiplier": 3.0},
    )

    plan = TradeSizer(settings, strategy_config).plan(
        trade_record_factory(usdc_size=100.0),
        follower_position=None,
        trader_position=None,
        follower_balance=50.0,
        trader_balance=9900.0,
    )

    assert plan.target == pytest.approx(1.5)
    assert plan.should_execute is True


def test_open_proportional_keeps_balance_buffer(settings_factory, strategy_config, trade_record_factory) -> None:
    settings = settings_factory(execution={"sizing_mode": "proportional"})

    plan = TradeSizer(settings, strategy_config).plan(
        trade_record_factory(usdc_size=100.0),
        follower_position=None,
        trader_position=None,
        follower_balance=50.0,
        trader_balance=0.0,
    )

    assert plan.target == pytest.approx(49.5)


def test_sell_without_follower_position_is_skipped(settings, strategy_config, trade_record_factory) -> None:
    plan = TradeSizer(settings, strategy_config).plan(
        trade_record_factory(side="SELL", size=50.0),
        follower_position=None,
        trader_position=None,
        follower_balance=100.0,
        trader_balance=100.0,
    )

    assert plan.intent == TradeIntent.CLOSE
    assert plan.skip_reason == "no_follower_position"


def test_reduce_sells_proportionally(settings, strategy_config, trade_record_factory, position_factory) -> None:
    plan = TradeSizer(settings, strategy_config).plan(
        trade_record_factory(side="SELL", size=50.0),
        follower_position=position_factory(size=40.0),
        trader_position=position_factory(size=150.0),
        follower_balance=100.0,
        trader_balance=100.0,
    )

    assert plan.intent == TradeIntent.REDUCE
    assert plan.side == "SELL"
    assert plan.target == pytest.approx(10.0)
    assert plan.reference_price is None


@pytest.mark.parametrize(("multiplier", "expected"), [(2.0, 20.0), (10.0, 40.0)])
def test_reduce_multiplier_is_capped_at_position(
    settings_factory, strategy_config, trade_record_factory, position_factory, multiplier, expected
) -> None:
    settings = settings_factory(strategy={"trade_multiplier": multiplier})

    plan = TradeSizer(settings, strategy_config).plan(
        trade_record_factory(side="SELL", size=50.0),
        follower_position=position_factory(size=40.0),
        trader_position=position_factory(size=150.0),
        follower_balance=100.0,
        trader_balance=100.0,
    )

    assert plan.target == pytest.approx(expected)


def test_close_sells_whole_position(settings, strategy_config, trade_record_factory, position_factory) -> None:
    plan = TradeSizer(settings, strategy_config).plan(
        trade_record_factory(side="SELL", size=50.0),
        follower_position=position_factory(size=40.0),
        trader_position=None,
        follower_balance=100.0,
        trader_balance=100.0,
    )

    assert plan.intent == TradeIntent.CLOSE
    assert plan.target == pytest.approx(40.0)


def test_close_dust_position_is_below_minimum(
    settings, strategy_config, trade_record_factory, position_factory
) -> None:
    plan = TradeSizer(settings, strategy_config).plan(
        trade_record_factory(side="SELL", size=50.0),
        follower_position=position_factory(size=0.5),
        trader_position=None,
        follower_balance=100.0,
        trader_balance=100.0,
    )

    assert plan.skip_reason == "below_minimum"
    assert plan.target == 0.0
