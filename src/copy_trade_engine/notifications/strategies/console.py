# -*- coding: utf-8 -*-
"""Console channel: plain-text trade and resolution notifications on stdout."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from copy_trade_engine.notifications.strategies.base import BaseNotificationStrategy
from copy_trade_engine.notifications.types import NotificationMessage

if TYPE_CHECKING:  # pragma: no cover
    from copy_trade_engine.config import Settings
    from copy_trade_engine.notifications.types import NotificationStyler

SEPARATOR = "-" * 40


class ConsoleNotifier(BaseNotificationStrategy):
    """Writes each notification followed by a separator line (enabled by CONSOLE__ENABLED)."""

    def __init__(
        self,
        settings: "Settings",
        styler: "NotificationStyler",
        *,
        write: Callable[[str], None] = print,
    ) -> None:
        super().__init__(settings, styler)
        self._write = write

    async def _deliver(self, message: NotificationMessage, text: str) -> None:
        self._write(f"{text}\n{SEPARATOR}")
