# -*- coding: utf-8 -*-
"""Service to read a Polymarket wallet: USDC.e cash (on-chain) and positions (Data API)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog

from copy_trade_engine.models.position import Position
from copy_trade_engine.utils.validation import mask_address

if TYPE_CHECKING:
    from copy_trade_engine.clients.data_api import DataApiClient
    from copy_trade_engine.clients.rcp_client import RpcClient


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Point-in-time view of a wallet. Built fresh per trade, never cached."""

    wallet: str
    positions: list[Position] = field(default_factory=list)
    cash_usdc: Optional[float] = None
    """On-chain USDC.e balance; None when not requested."""

    @property
    def positions_value(self) -> float:
        """Mark-to-market value of all positions (sum of currentValue)."""
        return sum(p.current_value for p in self.positions)

    def position_for(self, asset: str) -> Optional[Position]:
        """Position in the given outcome token, or None."""
        asset = asset.strip()
        for position in self.positions:
            if position.asset == asset:
                return position
        return None


class PortfolioService:
    """Reads wallet cash (USDC.e via RpcClient) and the complete position set (DataApiClient)."""

    def __init__(
        self,
        rpc_client: "RpcClient",
        data_api: "DataApiClient",
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the service.

        Args:
            rpc_client: For on-chain USDC.e balance (get_usdc_balance).
            data_api: For positions (get_all_positions).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._rpc = rpc_client
        self._data_api = data_api
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def get_positions(self, wallet: str) -> list[Position]:
        """All positions of the wallet with a non-empty asset."""
        items = await self._data_api.get_all_positions(wallet.strip())
        positions = [Position.from_response(item) for item in items]
        return [p for p in positions if p.asset]

    async def get_cash_balance(self, wallet: str) -> float:
        """On-chain USDC.e balance of the wallet."""
        return float(await self._rpc.get_usdc_balance(wallet.strip()))

    async def snapshot(self, wallet: str, *, include_cash: bool = False) -> PortfolioSnapshot:
        """Fetch positions (and optionally cash) for the wallet.

        Args:
            wallet: Wallet address (0x...).
            include_cash: Also read the on-chain USDC.e balance.
        """
        wallet = wallet.strip()
        positions = await self.get_positions(wallet)
        cash = await self.get_cash_balance(wallet) if include_cash else None
        result = PortfolioSnapshot(wallet=wallet, positions=positions, cash_usdc=cash)
        self._logger.debug(
            "portfolio_snapshot",
            wallet_masked=mask_address(wallet),
            positions_count=len(positions),
            positions_value_usdc=result.positions_value,
            cash_usdc=cash,
        )
        return result
