"""Trade tracking service (polling the Data API /trades endpoint)."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, cast

import structlog

from copy_trade_engine.models.trade_record import TradeIntentRecord
from copy_trade_engine.utils.dedupe import trade_key
from copy_trade_engine.utils.validation import is_hex_address, mask_address

if TYPE_CHECKING:
    from copy_trade_engine.clients.data_api import DataApiClient
    from copy_trade_engine.config import Settings
    from copy_trade_engine.persistence.repositories.interfaces.trade_record_repository import (
        ITradeRecordRepository,
    )


class TradeTracker:
    """Stores a wallet's new Polymarket trades as pending TradeIntentRecords."""

    def __init__(
        self,
        settings: Settings,
        data_api: DataApiClient,
        trade_record_repository: ITradeRecordRepository,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the tracker.

        Args:
            settings: Application settings (uses settings.tracking).
            data_api: Data API client (injected).
            trade_record_repository: Where observed trades are stored (in-memory or DB).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
            clock: Epoch-seconds clock, for the too-old cutoff.
        """
        self._data_api = data_api
        self._settings = settings
        self._repo = trade_record_repository
        self._clock = clock
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def poll_once(self, wallet: str, *, baseline: bool = False, limit: int | None = None) -> int:
        """Fetch the latest trades and store the unseen ones.

        With baseline=True every unseen trade is stored as already processed, so
        history from before the engine started is never copied. Trades older than
        TRACKING__TOO_OLD_HOURS are stored processed as well.

        Returns:
            Number of new pending records.
        """
        tr = self._settings.tracking
        limit = limit if limit is not None and limit > 0 else tr.trades_limit
        cutoff = self._clock() - tr.too_old_hours * 3600
        wallet_masked = mask_address(wallet)

        latest = await self._data_api.get_trades(wallet, limit=limit, offset=0)
        new_pending = 0
        for t in reversed(latest):
            t_dict = cast(dict[str, Any], t)
            if await self._repo.contains_key(wallet, trade_key(t_dict)):
                continue
            try:
                record = TradeIntentRecord.from_trade(wallet, t_dict)
            except ValueError as e:
                self._logger.warning(
                    "tracking_trade_invalid",
                    tracking_wallet_masked=wallet_masked,
                    error_message=str(e),
                )
                continue

            too_old = record.timestamp < cutoff
            if baseline or too_old:
                record = record.with_processed(attempts=0)
            if not await self._repo.add(record):
                continue
            if baseline:
                continue
            if too_old:
                self._logger.debug(
                    "tracking_trade_too_old",
                    tracking_wallet_masked=wallet_masked,
                    trade_timestamp=record.timestamp,
                )
                continue

            new_pending += 1
            self._logger.info(
                "tracking_new_trade",
                tracking_wallet_masked=wallet_masked,
                record_id=str(record.id),
                trade_timestamp=record.timestamp,
                trade_condition_id=record.condition_id,
                trade_asset=record.asset,
                trade_outcome=record.outcome,
                trade_side=record.side,
                trade_price=record.price,
                trade_size=record.size,
                trade_usdc_size=record.usdc_size,
                trade_title=record.title,
            )
        return new_pending

    async def track(
        self,
        wallet: str,
        stop_event: asyncio.Event,
        *,
        poll_seconds: float | None = None,
        limit: int | None = None,
    ) -> None:
        """Poll for new trades until stop_event is set.

        The first successful poll establishes the baseline. A failing poll is
        logged and retried on the next interval.

        Args:
            wallet: 0x wallet address (42 chars).
            stop_event: Cooperative stop signal, checked between polls.
            poll_seconds: Polling interval; default from settings.tracking.poll_seconds.
            limit: Trades per poll; default from settings.tracking.trades_limit.
        """
        if not is_hex_address(wallet):
            raise ValueError("wallet must be a valid 0x wallet address (42 chars)")

        tr = self._settings.tracking
        poll_seconds = poll_seconds if poll_seconds is not None else tr.poll_seconds
        if poll_seconds <= 0:
            poll_seconds = 1.0
        wallet_masked = mask_address(wallet)
        self._logger.info(
            "tracking_started",
            tracking_wallet_masked=wallet_masked,
            tracking_poll_seconds=poll_seconds,
            tracking_limit=limit or tr.trades_limit,
        )

        baseline_done = False
        while not stop_event.is_set():
            try:
                await self.poll_once(wallet, baseline=not baseline_done, limit=limit)
                if not baseline_done:
                    baseline_done = True
                    self._logger.info("tracking_baseline_ready", tracking_wallet_masked=wallet_masked)
            except Exception as e:
                self._logger.exception(
                    "tracking_poll_failed",
                    tracking_wallet_masked=wallet_masked,
                    tracking_exception_type=type(e).__name__,
                    tracking_exception_message=str(e),
                )
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=poll_seconds)
            except asyncio.TimeoutError:
                pass

        self._logger.info(
            "tracking_stopped",
            tracking_wallet_masked=wallet_masked,
            tracking_stop_reason="stop_event",
        )
