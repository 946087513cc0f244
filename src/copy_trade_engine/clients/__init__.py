"""HTTP, API and chain clients."""

from copy_trade_engine.clients.clob_client import AsyncClobClient
from copy_trade_engine.clients.ctf_client import CtfClient
from copy_trade_engine.clients.data_api import DataApiClient
from copy_trade_engine.clients.http import AsyncHttpClient
from copy_trade_engine.clients.rcp_client import RpcClient

__all__ = [
    "AsyncClobClient",
    "AsyncHttpClient",
    "CtfClient",
    "DataApiClient",
    "RpcClient",
]
