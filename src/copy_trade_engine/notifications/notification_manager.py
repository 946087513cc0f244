"""NotificationService: queue-backed fan-out to every configured channel."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from copy_trade_engine.notifications.strategies import BaseNotificationStrategy
from copy_trade_engine.notifications.types import NotificationMessage


@dataclass
class NotificationService:
    """Dispatch notifications to all channels from a single background worker.

    notify() never blocks the caller and a full queue drops the message. Channels
    are sent to concurrently and a failing channel is logged without affecting the rest.
    """

    notifiers: list[BaseNotificationStrategy]
    queue_size: int = 1000
    get_logger: Callable[[str], Any] = field(default=structlog.get_logger)
    _queue: asyncio.Queue[NotificationMessage] | None = field(init=False, default=None)
    _worker_task: asyncio.Task[None] | None = field(init=False, default=None)
    _logger: Any = field(init=False)

    def __post_init__(self) -> None:
        self._logger = self.get_logger("NotificationService")

    @property
    def is_running(self) -> bool:
        return self._worker_task is not None

    async def initialize(self) -> None:
        """Initialize all channels and start the worker (no worker without channels)."""
        for notifier in self.notifiers:
            await notifier.initialize()
        if not self.notifiers:
            self._logger.info("notification_init_no_notifiers")
            return
        self._queue = asyncio.Queue[NotificationMessage](maxsize=self.queue_size)
        self._worker_task = asyncio.create_task(self._worker_loop())
        self._logger.debug(
            "notification_init_complete",
            notification_notifiers_count=len(self.notifiers),
            notification_queue_size=self.queue_size,
        )

    async def shutdown(self) -> None:
        """Drain the queue, stop the worker, then shut every channel down."""
        if self._queue is not None:
            self._queue.shutdown()
            await self._queue.join()
        if self._worker_task is not None:
            await self._worker_task
            self._worker_task = None
        self._queue = None
        for notifier in self.notifiers:
            await notifier.shutdown()
        self._logger.debug("notification_shutdown_complete")

    def notify(self, message: NotificationMessage) -> None:
        """Enqueue a notification (non-blocking for callers).

        Raises:
            RuntimeError: If channels are configured but initialize() was not awaited.
        """
        queue = self._queue
        if queue is None:
            if not self.notifiers:
                return
            raise RuntimeError("NotificationService not initialized")
        try:
            queue.put_nowait(message)
        except asyncio.QueueFull:
            self._logger.warning(
                "notification_queue_full_dropped",
                notification_event_type=message.event_type,
            )

    async def _worker_loop(self) -> None:
        queue = self._queue
        if queue is None:
            return
        while True:
            try:
                msg = await queue.get()
            except asyncio.QueueShutDown:
                break
            try:
                await self._dispatch(msg)
            finally:
                queue.task_done()

    async def _dispatch(self, message: NotificationMessage) -> None:
        results = await asyncio.gather(
            *(notifier.send_notification(message) for notifier in self.notifiers),
            return_exceptions=True,
        )
        for notifier, result in zip(self.notifiers, results):
            if isinstance(result, Exception):
                self._logger.error(
                    "notification_channel_failed",
                    notification_event_type=message.event_type,
                    notification_channel=type(notifier).__name__,
                    error_type=type(result).__name__,
                    error_message=str(result),
                    exc_info=result,
                )
