# -*- coding: utf-8 -*-
"""Polygon JSON-RPC client for on-chain reads."""

from copy_trade_engine.clients.rcp_client.rcp_client import RpcClient

__all__ = ["RpcClient"]
