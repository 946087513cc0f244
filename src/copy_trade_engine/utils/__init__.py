# -*- coding: utf-8 -*-
"""Utility modules."""

from copy_trade_engine.utils.dedupe import trade_key
from copy_trade_engine.utils.validation import (
    is_hex_address,
    mask_address,
)

__all__ = ["is_hex_address", "mask_address", "trade_key"]
