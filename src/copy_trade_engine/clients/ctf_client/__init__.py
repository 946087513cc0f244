# -*- coding: utf-8 -*-
"""Async facade for the Conditional Tokens contract (web3) with asyncio.to_thread."""

from copy_trade_engine.clients.ctf_client.ctf_client import CtfClient

__all__ = ["CtfClient"]
