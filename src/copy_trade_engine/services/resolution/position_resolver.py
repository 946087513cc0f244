# -*- coding: utf-8 -*-
"""PositionResolutionService: liquidates or redeems positions in resolved markets.

A position whose price sits at ~$1 (won) or ~$0 (lost) belongs to a resolved
market. The service first tries to sell it through the order book (same executor
as copy trades); once the book is gone it redeems the condition on-chain through
the Conditional Tokens contract.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog
from structlog.contextvars import bound_contextvars

from copy_trade_engine.events.orders.copy_trade_events import PositionResolvedEvent
from copy_trade_engine.exceptions import ChainTransactionError, MissingRequiredConfigError
from copy_trade_engine.utils.validation import mask_address

if TYPE_CHECKING:
    from bubus import EventBus  # type: ignore[import-untyped]

    from copy_trade_engine.clients import AsyncClobClient, CtfClient
    from copy_trade_engine.config import Settings
    from copy_trade_engine.models.position import Position
    from copy_trade_engine.services.order_execution import OrderBookExecutor
    from copy_trade_engine.services.portfolio import PortfolioService

WEI_PER_MATIC = 10**18


class PositionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    RESOLVED_WIN = "RESOLVED_WIN"
    RESOLVED_LOSS = "RESOLVED_LOSS"


class ResolveMethod(str, Enum):
    SOLD = "SOLD"
    REDEEMED = "REDEEMED"
    FAILED = "FAILED"


def classify_position(price: float, *, high: float = 0.99, low: float = 0.01) -> PositionStatus:
    """RESOLVED_WIN at price >= high, RESOLVED_LOSS at price <= low, ACTIVE otherwise."""
    if price >= high:
        return PositionStatus.RESOLVED_WIN
    if price <= low:
        return PositionStatus.RESOLVED_LOSS
    return PositionStatus.ACTIVE


@dataclass(frozen=True)
class ResolveResult:
    """Result of resolving one position."""

    method: ResolveMethod
    asset: str
    condition_id: str
    tokens: float = 0.0
    proceeds_usd: float = 0.0
    reason: Optional[str] = None
    tx_hash: Optional[str] = None


@dataclass
class ResolutionSummary:
    """Totals of one resolver pass."""

    scanned: int = 0
    resolved: int = 0
    sold_tokens: float = 0.0
    redeemed_tokens: float = 0.0
    proceeds_usd: float = 0.0
    failed: int = 0
    skipped_duplicates: int = 0

    def add(self, result: ResolveResult) -> None:
        if result.method == ResolveMethod.SOLD:
            self.sold_tokens += result.tokens
            self.proceeds_usd += result.proceeds_usd
        elif result.method == ResolveMethod.REDEEMED:
            self.redeemed_tokens += result.tokens
            self.proceeds_usd += result.proceeds_usd
        else:
            self.failed += 1


class PositionResolutionService:
    """Scans the follower's positions and closes out the resolved ones (sell, then redeem)."""

    _event_bus: Optional["EventBus"] = None

    def __init__(
        self,
        settings: "Settings",
        portfolio_service: "PortfolioService",
        clob_client: "AsyncClobClient",
        executor: "OrderBookExecutor",
        ctf_client: "CtfClient",
        event_bus: Optional[Any] = None,
        *,
        wallet_lock: Optional[asyncio.Lock] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            settings: Application settings (uses settings.resolver, settings.chain and settings.polymarket.funder).
            portfolio_service: Complete position set of the follower, loaded once per pass.
            clob_client: For the balance-allowance cache refresh before selling.
            executor: Order book executor (sell path).
            ctf_client: On-chain redemption.
            event_bus: Optional; receives one PositionResolvedEvent per resolved position.
            wallet_lock: Shared with TradeExecutorService; held for each position's sell
                and redemption, receipt wait included.
            get_logger: Logger factory.
            logger_name: Optional logger name.
        """
        self._settings = settings
        self._portfolio = portfolio_service
        self._clob = clob_client
        self._executor = executor
        self._ctf = ctf_client
        self._event_bus = event_bus
        self._wallet_lock = wallet_lock if wallet_lock is not None else asyncio.Lock()
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _follower_wallet(self) -> str:
        funder = self._settings.polymarket.funder
        if not funder:
            raise MissingRequiredConfigError("POLYMARKET__FUNDER")
        return funder.strip()

    def classify(self, position: "Position") -> PositionStatus:
        resolver = self._settings.resolver
        return classify_position(position.cur_price, high=resolver.resolved_high, low=resolver.resolved_low)

    async def run(self, stop_event: asyncio.Event) -> None:
        """Run a pass every RESOLVER__INTERVAL_SECONDS until stop_event is set.

        An exception in a pass is logged and the loop continues.
        """
        resolver = self._settings.resolver
        if not resolver.enabled:
            self._logger.info("resolver_disabled")
            return
        self._logger.info("resolver_started", interval_seconds=resolver.interval_seconds)
        while not stop_event.is_set():
            try:
                await self.resolve_once()
            except Exception as e:
                self._logger.exception(
                    "resolver_pass_failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=resolver.interval_seconds)
            except asyncio.TimeoutError:
                pass
        self._logger.info("resolver_stopped")

    async def resolve_once(self) -> ResolutionSummary:
        """One pass: load positions, resolve each resolved one, at most one redeem per condition."""
        wallet = self._follower_wallet()
        min_size = self._settings.resolver.min_position_size
        positions = [p for p in await self._portfolio.get_positions(wallet) if p.size > min_size]

        summary = ResolutionSummary(scanned=len(positions))
        redeemed_conditions: set[str] = set()

        for position in positions:
            status = self.classify(position)
            if status == PositionStatus.ACTIVE:
                continue
            summary.resolved += 1

            if position.condition_id and position.condition_id in redeemed_conditions:
                summary.skipped_duplicates += 1
                self._logger.debug(
                    "resolver_condition_already_redeemed",
                    asset=position.asset,
                    condition_id=position.condition_id,
                )
                continue

            try:
                result = await self.resolve_position(position, status)
            except Exception as e:
                self._logger.exception(
                    "resolver_position_failed",
                    asset=position.asset,
                    condition_id=position.condition_id,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                result = ResolveResult(
                    method=ResolveMethod.FAILED,
                    asset=position.asset,
                    condition_id=position.condition_id,
                    reason=str(e),
                )

            summary.add(result)
            if result.method == ResolveMethod.REDEEMED:
                redeemed_conditions.add(position.condition_id)
            await self._dispatch(position, status, result)

        if summary.resolved:
            self._logger.info(
                "resolver_pass_complete",
                wallet_masked=mask_address(wallet),
                scanned=summary.scanned,
                resolved=summary.resolved,
                sold_tokens=summary.sold_tokens,
                redeemed_tokens=summary.redeemed_tokens,
                proceeds_usd=summary.proceeds_usd,
                failed=summary.failed,
                skipped_duplicates=summary.skipped_duplicates,
            )
        return summary

    async def resolve_position(self, position: "Position", status: PositionStatus) -> ResolveResult:
        """Sell through the order book; redeem on-chain when the book is gone and the market is redeemable."""
        async with self._wallet_lock:
            return await self._resolve_position(position, status)

    async def _resolve_position(self, position: "Position", status: PositionStatus) -> ResolveResult:
        with bound_contextvars(
            asset=position.asset,
            condition_id=position.condition_id,
            position_status=status.value,
        ):
            self._logger.info(
                "resolver_position_found",
                title=position.title or position.slug,
                outcome=position.outcome,
                size=position.size,
                avg_price=position.avg_price,
                cur_price=position.cur_price,
                current_value=position.current_value,
                redeemable=position.redeemable,
            )
            resolver = self._settings.resolver

            await self._refresh_allowance_cache(position.asset)
            outcome = await self._executor.execute(
                position.asset,
                "SELL",
                position.size,
                min_size=resolver.min_sell_tokens,
                retry_limit=resolver.retry_limit,
            )
            if outcome.tokens > 0:
                return ResolveResult(
                    method=ResolveMethod.SOLD,
                    asset=position.asset,
                    condition_id=position.condition_id,
                    tokens=outcome.tokens,
                    proceeds_usd=outcome.notional_usd,
                )

            if not outcome.book_available:
                if position.redeemable:
                    return await self._redeem(position, status)
                self._logger.warning("resolver_not_yet_redeemable")
                return ResolveResult(
                    method=ResolveMethod.FAILED,
                    asset=position.asset,
                    condition_id=position.condition_id,
                    reason="order book closed but market not yet redeemable",
                )

            return ResolveResult(
                method=ResolveMethod.FAILED,
                asset=position.asset,
                condition_id=position.condition_id,
                reason=outcome.reason or outcome.state.value,
            )

    async def _refresh_allowance_cache(self, asset: str) -> None:
        """Best effort; a stale cache only makes the sell fail and fall through."""
        try:
            await self._clob.update_balance_allowance(token_id=asset)
        except Exception as e:
            self._logger.debug(
                "resolver_allowance_refresh_failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )

    async def _redeem(self, position: "Position", status: PositionStatus) -> ResolveResult:
        chain = self._settings.chain
        tx_hash: Optional[str] = None
        try:
            estimate = await self._ctf.get_fee_estimate()
            gas_price = int(estimate * chain.gas_price_multiplier)
            tx_hash = await self._ctf.redeem_positions(position.condition_id, gas_price=gas_price)
            receipt = await self._ctf.wait_for_receipt(tx_hash)
            if receipt["status"] != 1:
                raise ChainTransactionError("redeemPositions reverted", tx_hash=tx_hash)
        except (ChainTransactionError, ValueError) as e:
            self._logger.error(
                "resolver_redeem_failed",
                tx_hash=getattr(e, "tx_hash", None) or tx_hash,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return ResolveResult(
                method=ResolveMethod.FAILED,
                asset=position.asset,
                condition_id=position.condition_id,
                reason=str(e),
                tx_hash=tx_hash,
            )

        proceeds = position.size if status == PositionStatus.RESOLVED_WIN else 0.0
        self._logger.info(
            "resolver_redeemed",
            tx_hash=tx_hash,
            tokens=position.size,
            proceeds_usd=proceeds,
            gas_cost_matic=receipt.get("gasUsed", 0) * gas_price / WEI_PER_MATIC,
        )
        return ResolveResult(
            method=ResolveMethod.REDEEMED,
            asset=position.asset,
            condition_id=position.condition_id,
            tokens=position.size,
            proceeds_usd=proceeds,
            tx_hash=tx_hash,
        )

    async def _dispatch(self, position: "Position", status: PositionStatus, result: ResolveResult) -> None:
        if self._event_bus is None:
            return
        event = PositionResolvedEvent(
            asset=position.asset,
            condition_id=position.condition_id,
            status=status.value,
            method=result.method.value,
            tokens=result.tokens,
            proceeds_usd=result.proceeds_usd,
            reason=result.reason,
            tx_hash=result.tx_hash,
            title=position.title or position.slug,
        )
        await self._event_bus.dispatch(event)
