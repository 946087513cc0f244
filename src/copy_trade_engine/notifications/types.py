"""Notification payloads passed from the engine to NotificationService and its channels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

COPY_TRADE_EXECUTED = "copy_trade_executed"
COPY_TRADE_FAILED = "copy_trade_failed"
POSITION_RESOLVED = "position_resolved"
SYSTEM_STARTED = "system_started"
SYSTEM_STOPPED = "system_stopped"


@dataclass(frozen=True, slots=True)
class NotificationMessage:
    """One engine notification.

    event_type picks the styler layout (one of the constants above); any other
    type is rendered as its payload keys in sorted order. payload carries the
    raw event fields (asset, intent, filled_usd, tx_hash, ...).
    """

    event_type: str
    message: str
    title: str | None = None
    payload: dict[str, Any] | None = None

    @property
    def asset(self) -> str | None:
        """Outcome token the notification is about, if any."""
        return (self.payload or {}).get("asset")


class NotificationStyler(Protocol):
    def render(self, message: NotificationMessage, *, parse_html: bool = False) -> str:
        """HTML for Telegram when parse_html, plain text for the console otherwise."""
        ...
