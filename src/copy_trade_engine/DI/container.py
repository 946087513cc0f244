# -*- coding: utf-8 -*-
"""Dependency injection container (dependency-injector)."""

from __future__ import annotations

import asyncio

from dependency_injector import containers, providers

from copy_trade_engine.clients.clob_client import AsyncClobClient
from copy_trade_engine.clients.ctf_client import CtfClient
from copy_trade_engine.clients.data_api import DataApiClient
from copy_trade_engine.clients.http import AsyncHttpClient
from copy_trade_engine.clients.rcp_client import RpcClient
from copy_trade_engine.config import Settings, get_settings
from copy_trade_engine.events.bus import get_event_bus
from copy_trade_engine.models.copy_strategy import CopyStrategyConfig
from copy_trade_engine.notifications.notification_manager import NotificationService
from copy_trade_engine.notifications.strategies.base import BaseNotificationStrategy
from copy_trade_engine.notifications.strategies.console import ConsoleNotifier
from copy_trade_engine.notifications.strategies.telegram import TelegramNotifier
from copy_trade_engine.notifications.stylers.notification_styler import EventNotificationStyler
from copy_trade_engine.persistence.repositories.in_memory import InMemoryTradeRecordRepository
from copy_trade_engine.services.copy_trading import TradeExecutorService, TradeSizer
from copy_trade_engine.services.notifications import ExecutionNotifier
from copy_trade_engine.services.order_execution import OrderBookExecutor
from copy_trade_engine.services.portfolio import PortfolioService
from copy_trade_engine.services.resolution import PositionResolutionService
from copy_trade_engine.services.strategy import CopySizeCalculator, load_strategy_config
from copy_trade_engine.services.tracking_trader import TradeTracker


def _build_strategy_config(settings: Settings) -> CopyStrategyConfig:
    """Validated strategy config; raises ConfigValidationError at first resolution."""
    return load_strategy_config(settings.strategy)


def _build_notification_notifiers(
    settings: Settings,
    styler: EventNotificationStyler,
) -> list[BaseNotificationStrategy]:
    notifiers: list[BaseNotificationStrategy] = []
    if settings.console.enabled:
        notifiers.append(ConsoleNotifier(settings=settings, styler=styler))
    if settings.telegram.enabled:
        notifiers.append(TelegramNotifier(settings=settings, styler=styler))
    return notifiers


class Container(containers.DeclarativeContainer):
    """Application container. Wires settings, clients, repository, engine services and notifications."""

    config = providers.Callable(get_settings)

    event_bus = providers.Callable(get_event_bus)

    # --- Clients ---

    http_client = providers.Singleton(AsyncHttpClient, settings=config)

    data_api_client = providers.Singleton(DataApiClient, http_client=http_client, settings=config)

    rpc_client = providers.Singleton(RpcClient, http_client=http_client, settings=config)

    clob_client = providers.Singleton(AsyncClobClient, settings=config)

    ctf_client = providers.Singleton(CtfClient, settings=config)

    # One follower wallet: order activity from the executor and the resolver is serialized
    wallet_lock = providers.Singleton(asyncio.Lock)

    # --- Persistence ---

    trade_record_repository = providers.Singleton(InMemoryTradeRecordRepository)

    # --- Engine ---

    strategy_config = providers.Singleton(_build_strategy_config, config)

    copy_size_calculator = providers.Singleton(CopySizeCalculator)

    trade_sizer = providers.Singleton(
        TradeSizer,
        settings=config,
        strategy_config=strategy_config,
        calculator=copy_size_calculator,
    )

    portfolio_service = providers.Singleton(
        PortfolioService,
        rpc_client=rpc_client,
        data_api=data_api_client,
    )

    order_book_executor = providers.Singleton(
        OrderBookExecutor,
        settings=config,
        clob_client=clob_client,
        event_bus=event_bus,
    )

    trade_tracker = providers.Singleton(
        TradeTracker,
        settings=config,
        data_api=data_api_client,
        trade_record_repository=trade_record_repository,
    )

    trade_executor_service = providers.Singleton(
        TradeExecutorService,
        settings=config,
        trade_record_repository=trade_record_repository,
        portfolio_service=portfolio_service,
        executor=order_book_executor,
        sizer=trade_sizer,
        event_bus=event_bus,
        wallet_lock=wallet_lock,
    )

    position_resolution_service = providers.Singleton(
        PositionResolutionService,
        settings=config,
        portfolio_service=portfolio_service,
        clob_client=clob_client,
        executor=order_book_executor,
        ctf_client=ctf_client,
        event_bus=event_bus,
        wallet_lock=wallet_lock,
    )

    # --- Notifications ---

    notification_styler = providers.Singleton(EventNotificationStyler)

    notification_service = providers.Singleton(
        NotificationService,
        notifiers=providers.Callable(_build_notification_notifiers, config, notification_styler),
    )

    execution_notifier = providers.Singleton(
        ExecutionNotifier,
        notification_service=notification_service,
        event_bus=event_bus,
    )
