# -*- coding: utf-8 -*-
"""Shared aiohttp client for the Data API and Polygon JSON-RPC (retries, 429 backoff)."""

from __future__ import annotations

import asyncio
import random
import uuid
import aiohttp
import structlog
from typing import Any, Callable, Dict, Literal, Optional
from structlog.contextvars import bound_contextvars

from copy_trade_engine.config import Settings
from copy_trade_engine.exceptions import PolymarketAPIError, RateLimitError


def _parse_retry_after(header: Optional[str]) -> Optional[float]:
    """Retry-After in seconds; None when absent or not numeric."""
    try:
        return float(header) if header else None
    except ValueError:
        return None


class AsyncHttpClient:
    """JSON-over-HTTP client with API__MAX_RETRIES attempts per request.

    Owns its aiohttp session unless one is injected; close it with aclose()
    or use the client as an async context manager.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._settings = settings
        self._session = session
        self._owns_session = session is None
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._settings.api.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def aclose(self) -> None:
        """Close the session if this client created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    @staticmethod
    def _backoff_delay(attempt: int) -> float:
        """Exponential backoff with jitter, capped at 4 seconds."""
        return min(4.0, 0.25 * (2**attempt)) + random.uniform(0.0, 0.15)

    async def get(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET and decode JSON.

        Raises:
            RateLimitError: If every attempt was answered with 429.
            PolymarketAPIError: If the request still fails after all retries.
        """
        return await self._request("GET", url, params=params or {})

    async def post(self, url: str, *, json: Optional[Dict[str, Any]] = None) -> Any:
        """POST a JSON body and decode the JSON answer (same errors as get())."""
        return await self._request("POST", url, json=json or {})

    async def _request(
        self,
        method: Literal["GET", "POST"],
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        max_retries = self._settings.api.max_retries
        event = f"http_{method.lower()}"
        last_error: Optional[aiohttp.ClientError | asyncio.TimeoutError] = None
        retry_after: Optional[float] = None
        rate_limited = False

        with bound_contextvars(http_method=method, http_url=url, http_request_id=uuid.uuid4().hex[:12]):
            for attempt in range(max_retries):
                delay = self._backoff_delay(attempt)
                try:
                    session = await self._get_session()
                    async with session.request(method, url, params=params, json=json) as response:
                        rate_limited = response.status == 429
                        if rate_limited:
                            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
                            self._logger.warning(
                                f"{event}_rate_limited",
                                http_attempt=attempt + 1,
                                http_retry_after_seconds=retry_after,
                            )
                            if retry_after:
                                delay = retry_after
                        else:
                            response.raise_for_status()
                            return await response.json(content_type=None)
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    last_error = e
                    self._logger.debug(
                        f"{event}_retry",
                        http_attempt=attempt + 1,
                        http_status_code=getattr(e, "status", None),
                        error_type=type(e).__name__,
                        error_message=str(e),
                    )
                await asyncio.sleep(delay)

            if rate_limited:
                self._logger.error(f"{event}_rate_limit_exhausted", http_attempts=max_retries)
                raise RateLimitError(url=url, retry_after=retry_after)

            status_code = getattr(last_error, "status", None)
            self._logger.error(
                f"{event}_failed",
                http_status_code=status_code,
                http_attempts=max_retries,
                error_type=type(last_error).__name__ if last_error else None,
                error_message=str(last_error) if last_error else None,
            )
            raise PolymarketAPIError(
                f"{method} failed after {max_retries} retries: {url}",
                url=url,
                status_code=status_code,
                cause=last_error,
            ) from last_error
