# -*- coding: utf-8 -*-
"""Async facade for Polymarket CLOB (py_clob_client) with asyncio.to_thread."""

from copy_trade_engine.clients.clob_client.clob_client import AsyncClobClient

__all__ = ["AsyncClobClient"]
