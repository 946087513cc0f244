"""Notification strategies."""

from copy_trade_engine.notifications.strategies.base import BaseNotificationStrategy
from copy_trade_engine.notifications.strategies.console import ConsoleNotifier
from copy_trade_engine.notifications.strategies.telegram import TelegramNotifier

__all__ = [
    "BaseNotificationStrategy",
    "ConsoleNotifier",
    "TelegramNotifier",
]
