# -*- coding: utf-8 -*-
"""Delivery channel base: owns the open/closed lifecycle and rendering, subclasses deliver."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from copy_trade_engine.notifications.types import NotificationMessage

if TYPE_CHECKING:  # pragma: no cover
    from copy_trade_engine.config import Settings
    from copy_trade_engine.notifications.types import NotificationStyler


class BaseNotificationStrategy(ABC):
    """A channel for trade and resolution notifications (console, Telegram).

    Messages are rendered with the channel's styler (HTML when parse_html) and
    handed to _deliver(). While the channel is closed messages are dropped.
    Delivery errors propagate; NotificationService logs them per channel.
    """

    parse_html: ClassVar[bool] = False

    def __init__(self, settings: "Settings", styler: "NotificationStyler") -> None:
        self.settings = settings
        self.styler = styler
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def initialize(self) -> None:
        """Open the channel; a second call is a no-op."""
        if self._running:
            return
        await self._open()
        self._running = True

    async def shutdown(self) -> None:
        if not self._running:
            return
        self._running = False
        await self._close()

    async def send_notification(self, message: NotificationMessage) -> None:
        if not self._running:
            return
        await self._deliver(message, self.styler.render(message, parse_html=self.parse_html))

    async def _open(self) -> None:
        pass

    async def _close(self) -> None:
        pass

    @abstractmethod
    async def _deliver(self, message: NotificationMessage, text: str) -> None:
        """Send the rendered text of message."""
