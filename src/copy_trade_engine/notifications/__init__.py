"""Notification subsystem."""

from copy_trade_engine.notifications.notification_manager import NotificationService
from copy_trade_engine.notifications.strategies import (
    BaseNotificationStrategy,
    ConsoleNotifier,
    TelegramNotifier,
)
from copy_trade_engine.notifications.stylers import EventNotificationStyler
from copy_trade_engine.notifications.types import NotificationMessage, NotificationStyler

__all__ = [
    "BaseNotificationStrategy",
    "ConsoleNotifier",
    "EventNotificationStyler",
    "NotificationMessage",
    "NotificationService",
    "NotificationStyler",
    "TelegramNotifier",
]
