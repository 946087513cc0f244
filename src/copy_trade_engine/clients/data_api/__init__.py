# -*- coding: utf-8 -*-
"""Polymarket Data API client and response schemas."""

from copy_trade_engine.clients.data_api.data_api import DataApiClient
from copy_trade_engine.clients.data_api.schema import PositionSchema, TradeSchema

__all__ = ["DataApiClient", "PositionSchema", "TradeSchema"]
