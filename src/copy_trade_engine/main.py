# -*- coding: utf-8 -*-
"""
Entry point for the copy trade engine.

Orchestrates: logging, settings, container, API credentials, one tracker task per
followed wallet, the trade executor loop, the position resolver loop and shutdown
(SIGINT or CancelledError). All loops share one asyncio.Event as stop signal.

Run with: python -m copy_trade_engine.main  (or the `copy-trade-engine` script)

Notebook usage:
    from copy_trade_engine.main import run
    await run()  # Interrupt kernel to stop; loops finish their current pass first.
"""
from __future__ import annotations

import asyncio
import signal
from typing import Any, Optional

import structlog

from copy_trade_engine.DI import Container
from copy_trade_engine.config import get_settings
from copy_trade_engine.exceptions import MissingRequiredConfigError, PolymarketAPIError
from copy_trade_engine.logging.config import configure_logging
from copy_trade_engine.models import CopyStrategyConfig
from copy_trade_engine.notifications.types import SYSTEM_STARTED, SYSTEM_STOPPED, NotificationMessage
from copy_trade_engine.services.strategy.copy_size_calculator import CopySizeCalculator
from copy_trade_engine.utils import is_hex_address, mask_address


def _setup_sigint(shutdown_event: asyncio.Event) -> None:
    try:
        loop = asyncio.get_running_loop()
        loop.add_signal_handler(signal.SIGINT, shutdown_event.set)
    except NotImplementedError:
        pass  # Windows has no add_signal_handler


async def _stop_tasks(tasks: list[asyncio.Task[Any]], logger: Any) -> None:
    """Wait for loops to finish their current pass; surface unexpected task errors in the log."""
    results = await asyncio.gather(*tasks, return_exceptions=True)
    for task, result in zip(tasks, results):
        if isinstance(result, Exception):
            logger.error(
                "main_task_failed",
                task_name=task.get_name(),
                error_type=type(result).__name__,
                error_message=str(result),
            )


async def _check_strategy_against_balance(
    portfolio: Any, wallet: str, strategy_config: CopyStrategyConfig, logger: Any
) -> Optional[CopyStrategyConfig]:
    """Log the preset suggested for the follower cash balance; warn when the configured
    order cap is above it. Returns the suggested config, or None when the balance is unreadable.
    """
    try:
        balance = await portfolio.get_cash_balance(wallet)
    except (PolymarketAPIError, ValueError) as e:
        logger.warning(
            "main_balance_unavailable",
            error_type=type(e).__name__,
            error_message=str(e),
        )
        return None
    recommended = CopySizeCalculator.recommended_config(balance)
    fields = dict(
        balance_usd=round(balance, 2),
        strategy=strategy_config.strategy.value,
        max_order_size_usd=strategy_config.max_order_size_usd,
        recommended_strategy=recommended.strategy.value,
        recommended_max_order_size_usd=recommended.max_order_size_usd,
    )
    if strategy_config.max_order_size_usd > recommended.max_order_size_usd:
        logger.warning("main_strategy_above_recommended", **fields)
    else:
        logger.info("main_strategy_recommendation", **fields)
    return recommended


async def run() -> None:
    configure_logging()
    logger = structlog.get_logger("main")
    settings = get_settings()

    wallets = settings.tracking.target_wallets
    if not wallets:
        logger.error("main_missing_target_wallets", message="TRACKING__TARGET_WALLETS is not set")
        raise MissingRequiredConfigError("TRACKING__TARGET_WALLETS")
    invalid = [w for w in wallets if not is_hex_address(w)]
    if invalid:
        raise ValueError(f"Invalid wallet address(es) in TRACKING__TARGET_WALLETS: {invalid}")

    container = Container()
    strategy_config = container.strategy_config()
    clob_client = container.clob_client()
    await clob_client.ensure_api_creds()
    await _check_strategy_against_balance(
        container.portfolio_service(), settings.polymarket.funder, strategy_config, logger
    )

    tracker = container.trade_tracker()
    executor_service = container.trade_executor_service()
    resolver = container.position_resolution_service()
    http_client = container.http_client()
    notification_service = container.notification_service()
    await notification_service.initialize()
    execution_notifier = container.execution_notifier()
    execution_notifier.start()

    shutdown_event = asyncio.Event()
    _setup_sigint(shutdown_event)

    logger.info(
        "main_started",
        target_wallets=[mask_address(w) for w in wallets],
        follower_masked=mask_address(settings.polymarket.funder),
        strategy=strategy_config.strategy.value,
        sizing_mode=settings.execution.sizing_mode,
        resolver_enabled=settings.resolver.enabled,
    )
    notification_service.notify(
        NotificationMessage(
            event_type=SYSTEM_STARTED,
            message="Copy trade engine started",
            payload={
                "target_wallets": wallets,
                "strategy": strategy_config.strategy.value,
                "sizing_mode": settings.execution.sizing_mode,
            },
        )
    )

    tasks: list[asyncio.Task[Any]] = [
        asyncio.create_task(tracker.track(w, shutdown_event), name=f"tracker:{mask_address(w)}")
        for w in wallets
    ]
    tasks.append(asyncio.create_task(executor_service.run(shutdown_event), name="trade_executor"))
    tasks.append(asyncio.create_task(resolver.run(shutdown_event), name="position_resolver"))

    try:
        await shutdown_event.wait()
    except asyncio.CancelledError:
        logger.info("main_cancelled", message="Kernel or task cancelled; stopping system")
        shutdown_event.set()
        raise
    finally:
        logger.info("main_shutdown_started")
        shutdown_event.set()
        await _stop_tasks(tasks, logger)
        execution_notifier.stop()
        notification_service.notify(
            NotificationMessage(
                event_type=SYSTEM_STOPPED,
                message="Copy trade engine stopped",
                payload={},
            )
        )
        await notification_service.shutdown()
        await http_client.aclose()
        logger.info("main_shutdown_complete")


def main() -> None:
    asyncio.run(run())


__all__ = ["run", "main"]

if __name__ == "__main__":
    main()
