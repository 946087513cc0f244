# -*- coding: utf-8 -*-
"""Unit tests for NotificationService and the console/Telegram channels."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from telegram.error import BadRequest, NetworkError, RetryAfter

from copy_trade_engine.notifications import NotificationService
from copy_trade_engine.notifications.strategies import BaseNotificationStrategy, ConsoleNotifier, TelegramNotifier
from copy_trade_engine.notifications.stylers import EventNotificationStyler
from copy_trade_engine.notifications.types import NotificationMessage


class _RecordingNotifier(BaseNotificationStrategy):
    def __init__(self, *, fail: bool = False) -> None:
        super().__init__(None, EventNotificationStyler())  # type: ignore[arg-type]
        self.fail = fail
        self.sent: list[NotificationMessage] = []
        self.texts: list[str] = []

    async def _deliver(self, message: NotificationMessage, text: str) -> None:
        if self.fail:
            raise RuntimeError("channel down")
        self.sent.append(message)
        self.texts.append(text)


MESSAGE = NotificationMessage(event_type="system_started", message="up")


async def test_delivers_to_every_channel_and_isolates_failures() -> None:
    broken = _RecordingNotifier(fail=True)
    healthy = _RecordingNotifier()
    service = NotificationService(notifiers=[broken, healthy])

    await service.initialize()
    assert service.is_running is True
    service.notify(MESSAGE)
    await service.shutdown()

    assert healthy.sent == [MESSAGE]
    assert healthy.texts[0].startswith("▶️ System Started")
    assert healthy.is_running is False
    assert service.is_running is False


async def test_notify_before_initialize_raises() -> None:
    service = NotificationService(notifiers=[_RecordingNotifier()])

    with pytest.raises(RuntimeError):
        service.notify(MESSAGE)


async def test_without_channels_notify_is_a_no_op() -> None:
    service = NotificationService(notifiers=[])

    await service.initialize()
    service.notify(MESSAGE)
    await service.shutdown()

    assert service.is_running is False


async def test_full_queue_drops_message() -> None:
    notifier = _RecordingNotifier()
    service = NotificationService(notifiers=[notifier], queue_size=1)
    await service.initialize()

    service.notify(MESSAGE)
    service.notify(NotificationMessage(event_type="system_stopped", message="down"))
    await service.shutdown()

    assert notifier.sent == [MESSAGE]


async def test_console_notifier_writes_plain_text(settings) -> None:
    lines: list[str] = []
    notifier = ConsoleNotifier(settings, EventNotificationStyler(), write=lines.append)

    await notifier.send_notification(MESSAGE)
    await notifier.initialize()
    await notifier.send_notification(MESSAGE)

    assert len(lines) == 1
    assert lines[0].startswith("▶️ System Started")
    assert lines[0].endswith("\n" + "-" * 40)


def test_telegram_requires_credentials(settings) -> None:
    with pytest.raises(ValueError):
        TelegramNotifier(settings, EventNotificationStyler())


@pytest.fixture
def telegram_settings(settings_factory):
    return settings_factory(
        telegram={
            "enabled": True,
            "api_key": "123:abc",
            "chat_id": "42",
            "max_retries": 2,
            "backoff_base_seconds": 0.1,
        }
    )


async def test_telegram_sends_html(telegram_settings) -> None:
    bot = AsyncMock()
    notifier = TelegramNotifier(telegram_settings, EventNotificationStyler(), bot=bot)
    await notifier.initialize()

    await notifier.send_notification(MESSAGE)

    kwargs = bot.send_message.await_args.kwargs
    assert kwargs["chat_id"] == "42"
    assert kwargs["parse_mode"] == "HTML"
    assert kwargs["text"].startswith("▶️ <b>System Started</b>")


async def test_telegram_retries_after_flood_control(telegram_settings) -> None:
    bot = AsyncMock()
    bot.send_message.side_effect = [RetryAfter(0), None]
    notifier = TelegramNotifier(telegram_settings, EventNotificationStyler(), bot=bot)
    await notifier.initialize()

    await notifier.send_notification(MESSAGE)

    assert bot.send_message.await_count == 2


async def test_telegram_drops_rejected_message(telegram_settings) -> None:
    bot = AsyncMock()
    bot.send_message.side_effect = BadRequest("chat not found")
    notifier = TelegramNotifier(telegram_settings, EventNotificationStyler(), bot=bot)
    await notifier.initialize()

    await notifier.send_notification(MESSAGE)

    assert bot.send_message.await_count == 1


async def test_telegram_gives_up_after_max_retries(telegram_settings) -> None:
    bot = AsyncMock()
    bot.send_message.side_effect = NetworkError("connection reset")
    notifier = TelegramNotifier(telegram_settings, EventNotificationStyler(), bot=bot)
    await notifier.initialize()

    await notifier.send_notification(MESSAGE)

    assert bot.send_message.await_count == 2


async def test_shutdown_closes_channel_and_drops_later_messages() -> None:
    notifier = _RecordingNotifier()
    await notifier.initialize()
    await notifier.shutdown()

    await notifier.send_notification(MESSAGE)

    assert notifier.sent == []


def test_message_asset_comes_from_payload() -> None:
    assert NotificationMessage(event_type="copy_trade_executed", message="", payload={"asset": "123"}).asset == "123"
    assert MESSAGE.asset is None
