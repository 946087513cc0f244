# -*- coding: utf-8 -*-
"""Async facade for Polymarket CLOB (py_clob_client) with asyncio.to_thread.

Centralizes ClobClient construction from settings and runs all sync methods
in a thread pool so callers can use async/await without blocking the event loop.

API alignment: https://pypi.org/project/py-clob-client and project docs.
- Read-only (Level 0): get_order_book.
- Trading (auth): create_or_derive_api_creds, set_api_creds, create_market_order,
    post_order, get_balance_allowance, update_balance_allowance.
"""

from __future__ import annotations

import asyncio
import structlog
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, cast

from py_clob_client.clob_types import (  # type: ignore[import-untyped]
    AssetType,
    BalanceAllowanceParams,
    OrderBookSummary,
    OrderType,
    SignedOrder,
)

from copy_trade_engine.config import Settings
from copy_trade_engine.exceptions import MissingRequiredConfigError
from copy_trade_engine.logging.config import scoped_log_level

if TYPE_CHECKING:
    from py_clob_client.client import ClobClient  # type: ignore[import-untyped]
    from py_clob_client.clob_types import (  # type: ignore[import-untyped]
        ApiCreds,
        MarketOrderArgs,
        PartialCreateOrderOptions,
    )


def _build_sync_client(settings: Settings) -> "ClobClient":
    """Build a sync ClobClient from settings.

    API credentials are optional here; without them call ensure_api_creds()
    before trading.

    Args:
        settings: Application settings.

    Raises:
        MissingRequiredConfigError: If POLYMARKET__PRIVATE_KEY or POLYMARKET__FUNDER is not set.
    """
    from py_clob_client.client import ClobClient, ApiCreds  # type: ignore[import-untyped]

    pm = settings.polymarket
    if not pm.private_key:
        raise MissingRequiredConfigError("POLYMARKET__PRIVATE_KEY")
    if not pm.funder:
        raise MissingRequiredConfigError("POLYMARKET__FUNDER")

    creds: Optional[ApiCreds] = None
    if pm.api_key and pm.api_secret and pm.api_passphrase:
        creds = ApiCreds(
            api_key=pm.api_key,
            api_secret=pm.api_secret,
            api_passphrase=pm.api_passphrase,
        )

    return ClobClient(
        host=pm.clob_host,
        chain_id=pm.chain_id,
        key=pm.private_key,
        creds=creds,
        signature_type=pm.signature_type,
        funder=pm.funder,
    )


class AsyncClobClient:
    """Async wrapper around py_clob_client.ClobClient. All methods run via asyncio.to_thread."""

    def __init__(
        self,
        settings: Settings,
        *,
        sync_client: Optional["ClobClient"] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize from settings or an existing sync ClobClient.

        Args:
            settings: Application settings (used if sync_client is None).
            sync_client: Optional pre-built ClobClient (e.g. from notebooks). If None, builds from settings.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._settings = settings
        if sync_client is not None:
            self._client = sync_client
        else:
            self._client = _build_sync_client(settings)
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def sync_client(self) -> "ClobClient":
        """Access the underlying sync ClobClient for advanced or one-off calls."""
        return self._client

    async def _run[T](self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a sync call in a thread. Use for any py_clob_client method."""
        return await asyncio.to_thread(fn, *args, **kwargs)

    # --- Credentials (run in thread in case of I/O) ---

    async def create_or_derive_api_creds(self) -> "ApiCreds":
        """Create or derive API credentials. Returns ApiCreds."""
        return await self._run(self._client.create_or_derive_api_creds)

    def set_api_creds(self, creds: "ApiCreds") -> None:
        """Set API credentials on the client (sync; no I/O in typical usage)."""
        self._client.set_api_creds(creds)

    async def ensure_api_creds(self) -> None:
        """Create/derive API creds and set them. Safe to call multiple times.

        Derivation is noisy (the SDK logs a failed create before deriving), so it
        runs under a scoped log level instead of silencing loggers globally.
        """
        with scoped_log_level(self._settings.logging.quiet_level):
            creds = await self.create_or_derive_api_creds()
        self.set_api_creds(creds)
        self._logger.info("clob_api_creds_ready")

    # --- Order book and orders ---

    async def get_order_book(self, token_id: str) -> "OrderBookSummary":
        """Get order book for a token id (read-only)."""
        return await self._run(cast(Callable[[str], OrderBookSummary], self._client.get_order_book), str(token_id).strip())

    async def create_market_order(self, order_args: "MarketOrderArgs", options: Optional["PartialCreateOrderOptions"] = None) -> "SignedOrder":
        """Create a signed market order (MarketOrderArgs). Returns signed order."""
        return await self._run(self._client.create_market_order, order_args, options)

    async def post_order(self, signed_order: "SignedOrder", order_type: OrderType = OrderType.FOK) -> Optional[Dict[str, Any]]:  # type: ignore[assignment]
        """Post a signed order (e.g. OrderType.FOK, OrderType.FAK, OrderType.GTC)."""
        response = await self._run(cast(Callable[[SignedOrder, OrderType], Any], self._client.post_order), signed_order, order_type)
        if isinstance(response, dict):
            return cast(Dict[str, Any], response)
        return None

    # --- Balance / allowance (requires auth) ---

    async def get_balance_allowance(self, params: "BalanceAllowanceParams") -> Any:
        """Get balance/allowance (e.g. BalanceAllowanceParams with asset_type=AssetType.COLLATERAL)."""
        return await self._run(self._client.get_balance_allowance, params)

    async def update_balance_allowance(self, token_id: Optional[str] = None) -> Any:
        """Refresh the CLOB's cached balance/allowance.

        With token_id, refreshes the conditional token (needed before selling);
        without it, refreshes collateral.
        """
        if token_id:
            params = BalanceAllowanceParams(asset_type=AssetType.CONDITIONAL, token_id=str(token_id).strip())
        else:
            params = BalanceAllowanceParams(asset_type=AssetType.COLLATERAL)
        return await self._run(self._client.update_balance_allowance, params)
