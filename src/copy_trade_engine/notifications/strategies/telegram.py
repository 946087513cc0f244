# -*- coding: utf-8 -*-
"""Telegram notification channel (python-telegram-bot, async)."""

from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog
from telegram import Bot
from telegram.error import BadRequest, Forbidden, RetryAfter, TelegramError
from telegram.request import HTTPXRequest

from copy_trade_engine.notifications.strategies.base import BaseNotificationStrategy
from copy_trade_engine.notifications.types import NotificationMessage

if TYPE_CHECKING:
    from copy_trade_engine.config import Settings
    from copy_trade_engine.notifications.types import NotificationStyler

RATE_WINDOW_SECONDS = 60.0
MAX_BACKOFF_SECONDS = 60.0


class TelegramNotifier(BaseNotificationStrategy):
    """Send HTML-rendered notifications to one Telegram chat.

    Messages are rate limited to TELEGRAM__MESSAGES_PER_MINUTE. RetryAfter waits
    the server-provided delay; network and other Telegram errors back off
    exponentially; BadRequest/Forbidden drop the message.
    """

    parse_html = True

    def __init__(
        self,
        settings: "Settings",
        styler: "NotificationStyler",
        *,
        bot: Optional[Bot] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the notifier.

        Args:
            settings: Application settings (uses settings.telegram).
            styler: Renders messages to HTML.
            bot: Optional pre-built Bot (tests). If None, one is built on initialize().
            get_logger: Logger factory.
            logger_name: Optional logger name.

        Raises:
            ValueError: If TELEGRAM__API_KEY or TELEGRAM__CHAT_ID is missing.
        """
        super().__init__(settings, styler)
        cfg = settings.telegram
        if not cfg.api_key or not cfg.chat_id:
            raise ValueError("TelegramNotifier requires TELEGRAM__API_KEY and TELEGRAM__CHAT_ID")
        self._token = str(cfg.api_key)
        self._chat_id = str(cfg.chat_id)
        self._bot = bot
        self._owns_bot = bot is None
        self._sent_at: deque[float] = deque()
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def _open(self) -> None:
        if self._bot is None:
            cfg = self.settings.telegram
            request = HTTPXRequest(
                connect_timeout=cfg.connect_timeout,
                read_timeout=cfg.read_timeout,
                write_timeout=cfg.write_timeout,
                pool_timeout=cfg.pool_timeout,
            )
            self._bot = Bot(token=self._token, request=request)
        self._logger.debug("telegram_notifier_started")

    async def _close(self) -> None:
        if self._owns_bot:
            self._bot = None

    async def _deliver(self, message: NotificationMessage, text: str) -> None:
        await self._send(text, event_type=message.event_type)

    def _backoff(self, attempt: int) -> float:
        return min(MAX_BACKOFF_SECONDS, self.settings.telegram.backoff_base_seconds * (2 ** (attempt - 1)))

    async def _send(self, text: str, *, event_type: str) -> None:
        assert self._bot is not None
        max_retries = max(1, self.settings.telegram.max_retries)
        for attempt in range(1, max_retries + 1):
            await self._wait_for_rate_limit()
            try:
                await self._bot.send_message(chat_id=self._chat_id, text=text, parse_mode="HTML")
                self._sent_at.append(time.monotonic())
                return
            except RetryAfter as exc:
                retry_after = exc.retry_after
                delay = retry_after.total_seconds() if hasattr(retry_after, "total_seconds") else float(retry_after)
                self._logger.warning("telegram_retry_after", retry_seconds=delay, attempt=attempt)
                await asyncio.sleep(delay)
            except (BadRequest, Forbidden) as exc:
                self._logger.error(
                    "telegram_message_rejected",
                    event_type=event_type,
                    error_type=type(exc).__name__,
                    error_message=str(exc),
                )
                return
            except TelegramError as exc:
                # NetworkError and TimedOut are TelegramError subclasses
                delay = self._backoff(attempt)
                self._logger.warning(
                    "telegram_send_retry",
                    error_type=type(exc).__name__,
                    attempt=attempt,
                    max_retries=max_retries,
                    backoff_seconds=delay,
                )
                await asyncio.sleep(delay)
        self._logger.error("telegram_max_retries_exceeded_message_dropped", event_type=event_type, max_retries=max_retries)

    async def _wait_for_rate_limit(self) -> None:
        limit = self.settings.telegram.messages_per_minute
        now = time.monotonic()
        while self._sent_at and self._sent_at[0] < now - RATE_WINDOW_SECONDS:
            self._sent_at.popleft()
        if len(self._sent_at) >= limit:
            await asyncio.sleep(max(0.0, self._sent_at[0] + RATE_WINDOW_SECONDS - now))
