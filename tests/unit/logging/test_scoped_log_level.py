# -*- coding: utf-8 -*-
"""Unit tests for scoped_log_level and its structlog/stdlib filters."""

from __future__ import annotations

import asyncio
import logging

import pytest
import structlog

from copy_trade_engine.logging.config import (
    ScopedLevelFilter,
    current_scoped_level,
    filter_by_scoped_level,
    scoped_log_level,
)


def _record(level: int) -> logging.LogRecord:
    return logging.LogRecord("py_clob_client", level, __file__, 1, "msg", None, None)


def test_no_scope_lets_everything_through() -> None:
    assert current_scoped_level() is None
    assert filter_by_scoped_level(None, "debug", {"event": "x"}) == {"event": "x"}
    assert ScopedLevelFilter().filter(_record(logging.DEBUG)) is True


def test_scope_drops_lower_levels_and_resets() -> None:
    with scoped_log_level("WARNING"):
        assert current_scoped_level() == logging.WARNING
        with pytest.raises(structlog.DropEvent):
            filter_by_scoped_level(None, "info", {"event": "x"})
        assert filter_by_scoped_level(None, "error", {"event": "x"}) == {"event": "x"}
        assert ScopedLevelFilter().filter(_record(logging.INFO)) is False
        assert ScopedLevelFilter().filter(_record(logging.WARNING)) is True
    assert current_scoped_level() is None


def test_scope_accepts_int_and_rejects_unknown() -> None:
    with scoped_log_level(logging.ERROR):
        assert current_scoped_level() == logging.ERROR
    with pytest.raises(ValueError):
        with scoped_log_level("LOUD"):
            pass


async def test_scope_reaches_worker_threads() -> None:
    with scoped_log_level("ERROR"):
        level = await asyncio.to_thread(current_scoped_level)
    assert level == logging.ERROR


async def test_scope_does_not_leak_into_other_tasks() -> None:
    started = asyncio.Event()
    release = asyncio.Event()
    seen: list[int | None] = []

    async def scoped() -> None:
        with scoped_log_level("ERROR"):
            started.set()
            await release.wait()

    async def observer() -> None:
        await started.wait()
        seen.append(current_scoped_level())
        release.set()

    await asyncio.gather(scoped(), observer())

    assert seen == [None]
