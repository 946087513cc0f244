"""Polygon JSON-RPC reads: ERC-20 balanceOf for the follower's USDC.e collateral."""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from typing import TYPE_CHECKING, Any, cast

import structlog

from copy_trade_engine.utils.validation import is_hex_address, mask_address

if TYPE_CHECKING:
    from copy_trade_engine.clients.http import AsyncHttpClient
    from copy_trade_engine.config import Settings

# bytes4(keccak256("balanceOf(address)"))
SELECTOR_BALANCE_OF = "0x70a08231"


class RpcClient:
    """Minimal eth_call client over AsyncHttpClient (no web3 needed for reads)."""

    def __init__(
        self,
        http_client: AsyncHttpClient,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def eth_call(self, to: str, data: str) -> str:
        """Read-only contract call at the latest block; returns the hex result.

        Raises:
            PolymarketAPIError: If the HTTP request fails.
            ValueError: If the node answers with an error object.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "eth_call",
            "params": [{"to": to.strip(), "data": data}, "latest"],
        }
        response = await self._http.post(self._settings.chain.rpc_url.rstrip("/"), json=payload)
        if not isinstance(response, dict):
            raise ValueError(f"Unexpected RPC response type: {type(response).__name__}")
        body = cast(dict[str, Any], response)
        if "error" in body:
            err = body["error"]
            message = err.get("message", err) if isinstance(err, dict) else err
            raise ValueError(f"RPC error: {message}")
        return str(body.get("result") or "0x0")

    async def balance_of(self, token_address: str, owner_address: str) -> int:
        """Raw ERC-20 balance (smallest units) of owner."""
        if not is_hex_address(owner_address):
            raise ValueError(f"Invalid owner address: {owner_address!r}")
        # balanceOf(address): selector + address left-padded to 32 bytes
        data = SELECTOR_BALANCE_OF + owner_address.strip()[2:].lower().rjust(64, "0")
        return int(await self.eth_call(token_address, data), 16)

    async def get_usdc_balance(self, owner_address: str) -> Decimal:
        """USDC.e balance in dollars, scaled by CHAIN__USDC_DECIMALS."""
        chain = self._settings.chain
        raw = await self.balance_of(chain.usdc_address, owner_address)
        balance = Decimal(raw) / (Decimal(10) ** chain.usdc_decimals)
        self._logger.debug(
            "rpc_usdc_balance",
            owner_masked=mask_address(owner_address),
            balance_usdc=float(balance),
        )
        return balance
