# -*- coding: utf-8 -*-
"""Polymarket Data API client: trader fills (/trades) and wallet positions (/positions)."""

from __future__ import annotations

import structlog
from typing import TYPE_CHECKING, Any, Callable, Optional, cast
from structlog.contextvars import bound_contextvars

from copy_trade_engine.clients.data_api.schema import PositionSchema, TradeSchema
from copy_trade_engine.config import Settings
from copy_trade_engine.utils.validation import mask_address

if TYPE_CHECKING:
    from copy_trade_engine.clients.http import AsyncHttpClient

MAX_POSITIONS_LIMIT = 500
MAX_POSITIONS_OFFSET = 10000


class DataApiClient:
    """Read-only client for the public Data API."""

    def __init__(
        self,
        http_client: "AsyncHttpClient",
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            http_client: Async HTTP client.
            settings: Uses settings.api.data_api_host and positions_page_size.
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def _get_items(self, path: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        url = f"{self._settings.api.data_api_host.rstrip('/')}{path}"
        data = await self._http.get(url, params=params)
        if not isinstance(data, list):
            self._logger.warning("data_api_non_list_response", data_api_path=path, data_api_response_type=type(data).__name__)
            return []
        return [cast(dict[str, Any], x) for x in cast(list[Any], data) if isinstance(x, dict)]

    async def get_trades(self, user: str, *, limit: int = 20, offset: int = 0) -> list[TradeSchema]:
        """Latest fills of a wallet, most recent first."""
        with bound_contextvars(data_api_user_masked=mask_address(user)):
            items = await self._get_items("/trades", {"user": user, "limit": limit, "offset": offset})
        return [cast(TradeSchema, x) for x in items]

    async def get_positions(
        self,
        user: str,
        *,
        size_threshold: float = 0.0,
        limit: int = MAX_POSITIONS_LIMIT,
        offset: int = 0,
    ) -> list[PositionSchema]:
        """One page of a wallet's positions, largest token count first.

        limit is clamped to 0-500 and offset to 0-10000 (API bounds).
        """
        params: dict[str, Any] = {
            "user": user,
            "sizeThreshold": size_threshold,
            "limit": max(0, min(MAX_POSITIONS_LIMIT, limit)),
            "offset": max(0, min(MAX_POSITIONS_OFFSET, offset)),
            "sortBy": "TOKENS",
            "sortDirection": "DESC",
        }
        with bound_contextvars(data_api_user_masked=mask_address(user), data_api_positions_offset=params["offset"]):
            items = await self._get_items("/positions", params)
        return [cast(PositionSchema, x) for x in items]

    async def get_all_positions(self, user: str, *, size_threshold: float = 0.0) -> list[PositionSchema]:
        """Complete position set of a wallet.

        Pages by API__POSITIONS_PAGE_SIZE until a short page or the API's offset
        ceiling is reached.
        """
        page_size = min(MAX_POSITIONS_LIMIT, self._settings.api.positions_page_size)
        result: list[PositionSchema] = []
        offset = 0
        while offset <= MAX_POSITIONS_OFFSET:
            page = await self.get_positions(user, size_threshold=size_threshold, limit=page_size, offset=offset)
            result.extend(page)
            if len(page) < page_size:
                break
            offset += page_size
        self._logger.debug(
            "data_api_all_positions_loaded",
            data_api_user_masked=mask_address(user),
            data_api_positions_count=len(result),
        )
        return result
