"""Notification stylers."""

from copy_trade_engine.notifications.stylers.notification_styler import EventNotificationStyler

__all__ = ["EventNotificationStyler"]
