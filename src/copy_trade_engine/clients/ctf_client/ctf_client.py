# -*- coding: utf-8 -*-
"""Async facade for the Conditional Tokens Framework (CTF) contract on Polygon.

Wraps a sync web3.Web3 instance and runs every call via asyncio.to_thread,
the same way AsyncClobClient wraps py_clob_client. Only what redemption needs:
gas price estimate, redeemPositions transaction, receipt wait.
"""

from __future__ import annotations

import asyncio
import structlog
from typing import TYPE_CHECKING, Any, Callable, Optional

from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception

from copy_trade_engine.exceptions import ChainTransactionError, MissingRequiredConfigError
from copy_trade_engine.utils.validation import mask_address

if TYPE_CHECKING:
    from copy_trade_engine.config import Settings

ZERO_BYTES32 = bytes(32)
BINARY_INDEX_SETS = [1, 2]

CTF_REDEEM_ABI: list[dict[str, Any]] = [
    {
        "inputs": [
            {"internalType": "contract IERC20", "name": "collateralToken", "type": "address"},
            {"internalType": "bytes32", "name": "parentCollectionId", "type": "bytes32"},
            {"internalType": "bytes32", "name": "conditionId", "type": "bytes32"},
            {"internalType": "uint256[]", "name": "indexSets", "type": "uint256[]"},
        ],
        "name": "redeemPositions",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    }
]


def condition_id_to_bytes32(condition_id: str) -> bytes:
    """Hex condition id (0x-prefixed or not) to 32 bytes, left zero-padded.

    Raises:
        ValueError: If condition_id is not hex or longer than 32 bytes.
    """
    s = (condition_id or "").strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    if not s or len(s) > 64:
        raise ValueError(f"Invalid condition id: {condition_id!r}")
    return bytes.fromhex(s.rjust(64, "0"))


class CtfClient:
    """Async wrapper around the CTF contract. All web3 calls run via asyncio.to_thread."""

    def __init__(
        self,
        settings: "Settings",
        *,
        web3: Optional[Web3] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize from settings or an existing Web3 instance.

        Args:
            settings: Application settings (uses settings.chain and settings.polymarket.private_key).
            web3: Optional pre-built Web3 (e.g. tests). If None, an HTTPProvider on CHAIN__RPC_URL.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._settings = settings
        self._w3 = web3 or Web3(Web3.HTTPProvider(settings.chain.rpc_url))
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def _run[T](self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a sync web3 call in a thread."""
        return await asyncio.to_thread(fn, *args, **kwargs)

    async def get_fee_estimate(self) -> int:
        """Current network gas price in wei.

        Raises:
            ChainTransactionError: If the RPC call fails.
        """
        try:
            return int(await self._run(lambda: self._w3.eth.gas_price))
        except (Web3Exception, ValueError, OSError) as e:
            raise ChainTransactionError(f"gas price estimate failed: {e}", cause=e) from e

    async def redeem_positions(self, condition_id: str, *, gas_price: int) -> str:
        """Send redeemPositions(collateral, 0x0, condition_id, [1, 2]) signed with the configured key.

        Args:
            condition_id: Market condition id (hex).
            gas_price: Gas price in wei.

        Returns:
            Transaction hash (0x-prefixed hex).

        Raises:
            MissingRequiredConfigError: If POLYMARKET__PRIVATE_KEY is not set.
            ChainTransactionError: If building, signing or sending the transaction fails.
        """
        private_key = self._settings.polymarket.private_key
        if not private_key:
            raise MissingRequiredConfigError("POLYMARKET__PRIVATE_KEY")
        condition_bytes = condition_id_to_bytes32(condition_id)
        try:
            tx_hash = await self._run(self._send_redeem, private_key, condition_bytes, gas_price)
        except (Web3Exception, ValueError, OSError) as e:
            raise ChainTransactionError(f"redeemPositions failed to send: {e}", cause=e) from e
        self._logger.info(
            "ctf_redeem_sent",
            condition_id=condition_id,
            tx_hash=tx_hash,
            gas_price_wei=gas_price,
        )
        return tx_hash

    def _send_redeem(self, private_key: str, condition_bytes: bytes, gas_price: int) -> str:
        chain = self._settings.chain
        w3 = self._w3
        account = w3.eth.account.from_key(private_key)
        contract = w3.eth.contract(
            address=Web3.to_checksum_address(chain.ctf_address),
            abi=CTF_REDEEM_ABI,
        )
        tx = contract.functions.redeemPositions(
            Web3.to_checksum_address(chain.usdc_address),
            ZERO_BYTES32,
            condition_bytes,
            BINARY_INDEX_SETS,
        ).build_transaction(
            {
                "from": account.address,
                "nonce": w3.eth.get_transaction_count(account.address, "pending"),
                "gas": chain.gas_limit,
                "gasPrice": gas_price,
                "chainId": self._settings.polymarket.chain_id,
            }
        )
        signed = w3.eth.account.sign_transaction(tx, private_key)
        self._logger.debug("ctf_redeem_signed", sender_masked=mask_address(account.address))
        return Web3.to_hex(w3.eth.send_raw_transaction(signed.raw_transaction))

    async def wait_for_receipt(self, tx_hash: str) -> Any:
        """Wait for the receipt (bounded by CHAIN__RECEIPT_TIMEOUT_SECONDS).

        Returns:
            The transaction receipt (AttributeDict with `status`).

        Raises:
            ChainTransactionError: On timeout or RPC failure.
        """
        timeout = self._settings.chain.receipt_timeout_seconds
        try:
            return await self._run(self._w3.eth.wait_for_transaction_receipt, tx_hash, timeout=timeout)
        except TimeExhausted as e:
            raise ChainTransactionError(
                f"receipt not available after {timeout}s", tx_hash=tx_hash, cause=e
            ) from e
        except (Web3Exception, ValueError, OSError) as e:
            raise ChainTransactionError(f"receipt wait failed: {e}", tx_hash=tx_hash, cause=e) from e
