# -*- coding: utf-8 -*-
"""Unit tests for CopySizeCalculator (pure sizing policy)."""

from __future__ import annotations

from dataclasses import replace

import pytest

from copy_trade_engine.config.config import StrategySettings
from copy_trade_engine.exceptions import ConfigValidationError
from copy_trade_engine.models.copy_strategy import CopyStrategy, CopyStrategyConfig
from copy_trade_engine.services.strategy.copy_size_calculator import (
    CopySizeCalculator,
    lerp,
    load_strategy_config,
)


def _percentage(**overrides: float | None) -> CopyStrategyConfig:
    base = CopyStrategyConfig(
        strategy=CopyStrategy.PERCENTAGE,
        copy_size=10.0,
        max_order_size_usd=100.0,
        min_order_size_usd=1.0,
    )
    return replace(base, **overrides)


def _adaptive() -> CopyStrategyConfig:
    return CopyStrategyConfig(
        strategy=CopyStrategy.ADAPTIVE,
        copy_size=10.0,
        adaptive_min_percent=5.0,
        adaptive_max_percent=15.0,
        adaptive_threshold=300.0,
        max_order_size_usd=1000.0,
        min_order_size_usd=1.0,
    )


def test_percentage_basic_scenario() -> None:
    result = CopySizeCalculator().calculate(_percentage(), 100.0, 1000.0, 0.0)
    assert result.final_amount == pytest.approx(10.0)
    assert result.below_minimum is False
    assert result.capped_by_max is False
    assert result.should_execute is True


def test_percentage_capped_at_max_order_size() -> None:
    result = CopySizeCalculator().calculate(_percentage(), 2000.0, 10000.0, 0.0)
    assert result.final_amount == pytest.approx(100.0)
    assert result.capped_by_max is True
    assert "Capped at max" in result.reasoning


def test_percentage_below_minimum_returns_zero() -> None:
    result = CopySizeCalculator().calculate(_percentage(), 5.0, 1000.0, 0.0)
    assert result.final_amount == 0.0
    assert result.below_minimum is True
    assert result.should_execute is False


def test_percentage_reduced_by_balance_with_safety_buffer() -> None:
    result = CopySizeCalculator().calculate(_percentage(), 100.0, 5.0, 0.0)
    assert result.final_amount == pytest.approx(4.95)
    assert result.reduced_by_balance is True


def test_position_limit_allows_order_that_exactly_fills_limit() -> None:
    config = _percentage(max_position_size_usd=50.0)
    result = CopySizeCalculator().calculate(config, 100.0, 1000.0, 40.0)
    assert result.final_amount == pytest.approx(10.0)


def test_position_limit_reduces_order_to_remaining_room() -> None:
    config = _percentage(max_position_size_usd=50.0)
    result = CopySizeCalculator().calculate(config, 100.0, 1000.0, 45.0)
    assert 0 < result.final_amount <= 5.0
    assert "position limit" in result.reasoning


def test_position_limit_reached_returns_zero() -> None:
    config = _percentage(max_position_size_usd=50.0)
    result = CopySizeCalculator().calculate(config, 100.0, 1000.0, 49.5)
    assert result.final_amount == 0.0
    assert "Position limit reached" in result.reasoning


def test_zero_position_limit_disables_the_check() -> None:
    config = _percentage(max_position_size_usd=0.0)
    result = CopySizeCalculator().calculate(config, 100.0, 1000.0, 500.0)
    assert result.final_amount == pytest.approx(10.0)


def test_fixed_strategy_ignores_trader_size() -> None:
    config = _percentage(copy_size=25.0)
    config = replace(config, strategy=CopyStrategy.FIXED)
    small = CopySizeCalculator().calculate(config, 1.0, 1000.0)
    large = CopySizeCalculator().calculate(config, 10_000.0, 1000.0)
    assert small.final_amount == pytest.approx(25.0)
    assert large.final_amount == pytest.approx(25.0)


def test_calculate_is_pure() -> None:
    calc = CopySizeCalculator()
    config = _adaptive()
    first = calc.calculate(config, 123.0, 800.0, 12.0)
    second = calc.calculate(config, 123.0, 800.0, 12.0)
    assert first == second


def test_final_amount_respects_bounds_across_inputs() -> None:
    calc = CopySizeCalculator()
    config = _percentage()
    for trader_size in (0.0, 0.5, 9.99, 10.0, 150.0, 999.0, 5000.0):
        for balance in (0.0, 1.0, 3.0, 50.0, 10_000.0):
            result = calc.calculate(config, trader_size, balance)
            assert result.final_amount == 0.0 or (
                config.min_order_size_usd <= result.final_amount <= config.max_order_size_usd
            )
            assert result.final_amount <= balance * 0.99 + 1e-9


def test_percentage_is_non_decreasing_until_cap() -> None:
    calc = CopySizeCalculator()
    config = _percentage()
    amounts = [calc.calculate(config, float(size), 1_000_000.0).final_amount for size in range(0, 2000, 50)]
    assert amounts == sorted(amounts)


def test_adaptive_percent_equals_copy_size_at_threshold() -> None:
    assert CopySizeCalculator().adaptive_percent(_adaptive(), 300.0) == pytest.approx(10.0)


def test_adaptive_percent_bounds() -> None:
    calc = CopySizeCalculator()
    config = _adaptive()
    assert calc.adaptive_percent(config, 0.0) == pytest.approx(15.0)
    assert calc.adaptive_percent(config, 150.0) == pytest.approx(12.5)
    assert calc.adaptive_percent(config, 450.0) == pytest.approx(7.5)
    assert calc.adaptive_percent(config, 600.0) == pytest.approx(5.0)
    assert calc.adaptive_percent(config, 100_000.0) == pytest.approx(5.0)
    for size in (1.0, 37.0, 299.0, 301.0, 599.0, 5000.0):
        assert 5.0 <= calc.adaptive_percent(config, size) <= 15.0


def test_adaptive_defaults_to_copy_size_without_percents() -> None:
    config = replace(_adaptive(), adaptive_min_percent=None, adaptive_max_percent=None, adaptive_threshold=None)
    calc = CopySizeCalculator()
    assert calc.adaptive_percent(config, 10.0) == pytest.approx(10.0)
    assert calc.adaptive_percent(config, 2000.0) == pytest.approx(10.0)


def test_unknown_strategy_raises_value_error() -> None:
    config = replace(_percentage(), strategy="MARTINGALE")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        CopySizeCalculator().calculate(config, 100.0, 100.0)


def test_lerp_clamps_t() -> None:
    assert lerp(0.0, 10.0, -1.0) == 0.0
    assert lerp(0.0, 10.0, 0.5) == 5.0
    assert lerp(0.0, 10.0, 2.0) == 10.0


def test_validate_accepts_valid_config() -> None:
    assert CopySizeCalculator.validate(_percentage()) == []
    assert CopySizeCalculator.validate(_adaptive()) == []


def test_validate_reports_every_violation() -> None:
    config = _percentage(copy_size=0.0, min_order_size_usd=200.0)
    errors = CopySizeCalculator.validate(config)
    assert "copy_size must be positive" in errors
    assert "min_order_size_usd cannot be greater than max_order_size_usd" in errors


def test_validate_percentage_over_100() -> None:
    errors = CopySizeCalculator.validate(_percentage(copy_size=150.0))
    assert errors == ["copy_size for PERCENTAGE strategy should be <= 100"]


def test_validate_adaptive_requires_ordered_percents() -> None:
    missing = replace(_adaptive(), adaptive_max_percent=None)
    inverted = replace(_adaptive(), adaptive_min_percent=20.0)
    assert any("requires" in e for e in CopySizeCalculator.validate(missing))
    assert any("cannot be greater" in e for e in CopySizeCalculator.validate(inverted))


@pytest.mark.parametrize(
    ("balance", "strategy", "max_order"),
    [
        (100.0, CopyStrategy.PERCENTAGE, 20.0),
        (1000.0, CopyStrategy.PERCENTAGE, 50.0),
        (5000.0, CopyStrategy.ADAPTIVE, 100.0),
    ],
)
def test_recommended_config_by_balance(balance: float, strategy: CopyStrategy, max_order: float) -> None:
    config = CopySizeCalculator.recommended_config(balance)
    assert config.strategy == strategy
    assert config.max_order_size_usd == max_order
    assert CopySizeCalculator.validate(config) == []


def test_load_strategy_config_from_settings() -> None:
    config = load_strategy_config(StrategySettings(strategy="FIXED", copy_size=25.0))
    assert config.strategy == CopyStrategy.FIXED
    assert config.copy_size == 25.0


def test_load_strategy_config_raises_with_all_errors() -> None:
    with pytest.raises(ConfigValidationError) as exc_info:
        load_strategy_config(
            StrategySettings(strategy="PERCENTAGE", copy_size=150.0, min_order_size_usd=500.0)
        )
    assert len(exc_info.value.errors) == 2
