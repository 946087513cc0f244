"""Notification-related services (copy trade executed/failed, position resolved)."""

from copy_trade_engine.services.notifications.execution_notifier import (
    ExecutionNotifier,
    reason_label,
)

__all__ = ["ExecutionNotifier", "reason_label"]
