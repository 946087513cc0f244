# -*- coding: utf-8 -*-
"""ExecutionNotifier: turns copy-trade and resolution events into notifications."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog

from copy_trade_engine.events.orders.copy_trade_events import (
    CopyTradeExecutedEvent,
    CopyTradeFailedEvent,
    PositionResolvedEvent,
)
from copy_trade_engine.notifications.types import (
    COPY_TRADE_EXECUTED,
    COPY_TRADE_FAILED,
    POSITION_RESOLVED,
    NotificationMessage,
)

if TYPE_CHECKING:
    from bubus import EventBus  # type: ignore[import-untyped]

    from copy_trade_engine.notifications.notification_manager import NotificationService


_REASON_LABELS = {
    "below_minimum": "Copy size below minimum",
    "no_follower_position": "No follower position to sell",
    "daily_volume_exhausted": "Daily volume limit reached",
    "ABORT_LIQUIDITY": "No liquidity in order book",
    "ABORT_SLIPPAGE": "Price moved beyond slippage tolerance",
    "ABORT_FUNDS": "Insufficient balance or allowance",
    "EXHAUSTED": "Retry limit reached",
    "BELOW_MINIMUM": "Copy size below minimum",
}


def reason_label(reason: str) -> str:
    """Human label for a skip reason or terminal execution state."""
    return _REASON_LABELS.get(reason, reason.replace("_", " ").capitalize())


class ExecutionNotifier:
    """Subscribes to copy-trade/resolution events on the bus and forwards them to NotificationService."""

    def __init__(
        self,
        notification_service: "NotificationService",
        event_bus: Any,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._notification_service = notification_service
        self._event_bus: "EventBus" = event_bus
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _subscriptions(self) -> list[tuple[type, Callable[[Any], None]]]:
        return [
            (CopyTradeExecutedEvent, self._on_executed),
            (CopyTradeFailedEvent, self._on_failed),
            (PositionResolvedEvent, self._on_resolved),
        ]

    def start(self) -> None:
        """Subscribe to the events."""
        for event_type, handler in self._subscriptions():
            self._event_bus.on(event_type, handler)
        self._logger.debug("execution_notifier_started")

    def stop(self) -> None:
        """Unsubscribe from the events."""
        handlers = getattr(self._event_bus, "handlers", {})
        for event_type, handler in self._subscriptions():
            key = event_type.__name__
            if key in handlers:
                handlers[key] = [h for h in handlers[key] if h != handler]
        self._logger.debug("execution_notifier_stopped")

    def _on_executed(self, event: CopyTradeExecutedEvent) -> None:
        partial = event.state != "FILLED"
        message = (
            f"{event.intent} partially filled: ${event.filled_usd:.2f} of target {event.target:.4f}"
            if partial
            else f"{event.intent} filled: {event.filled_tokens:.4f} tokens for ${event.filled_usd:.2f}"
        )
        self._send(
            COPY_TRADE_EXECUTED,
            message,
            {
                "record_id": event.record_id,
                "tracked_wallet": event.tracked_wallet,
                "asset": event.asset,
                "intent": event.intent,
                "state": event.state,
                "target": event.target,
                "filled_tokens": event.filled_tokens,
                "filled_usd": event.filled_usd,
                "title": event.title,
                "outcome": event.outcome,
            },
        )

    def _on_failed(self, event: CopyTradeFailedEvent) -> None:
        self._send(
            COPY_TRADE_FAILED,
            reason_label(event.reason),
            {
                "record_id": event.record_id,
                "tracked_wallet": event.tracked_wallet,
                "asset": event.asset,
                "intent": event.intent,
                "reason": event.reason,
                "error_message": event.error_message,
                "error_type": event.error_type,
                "attempts": event.attempts,
                "title": event.title,
            },
        )

    def _on_resolved(self, event: PositionResolvedEvent) -> None:
        if event.method == "FAILED":
            message = f"Could not close position: {event.reason or 'unknown'}"
        else:
            message = f"{event.method.capitalize()} {event.tokens:.2f} tokens for ${event.proceeds_usd:.2f}"
        self._send(
            POSITION_RESOLVED,
            message,
            {
                "asset": event.asset,
                "condition_id": event.condition_id,
                "status": event.status,
                "method": event.method,
                "tokens": event.tokens,
                "proceeds_usd": event.proceeds_usd,
                "reason": event.reason,
                "tx_hash": event.tx_hash,
                "title": event.title,
            },
        )

    def _send(self, event_type: str, message: str, payload: dict[str, Any]) -> None:
        notification = NotificationMessage(event_type=event_type, message=message, payload=payload)
        self._notification_service.notify(notification)
        self._logger.debug("execution_notification_queued", event_type=event_type, asset=notification.asset)
