"""
Web3 signing provider adapter

Submits transactions through a JSON-RPC provider that manages the signing
account itself (eth_sendTransaction), e.g. a wallet bridge or a node with
an unlocked account. This service never holds private keys.
"""

from typing import Any, Dict, Optional
import asyncio
import logging

from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted, TransactionNotFound

from actionlink.actions.lifecycle import SigningProvider
from actionlink.models.actions import TransactionDescriptor

logger = logging.getLogger(__name__)


def _hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    text = str(value)
    return text if text.startswith("0x") else f"0x{text}"


class Web3SigningProvider(SigningProvider):
    """
    SigningProvider over web3's async API.

    Args:
        w3: Connected AsyncWeb3 instance
        receipt_timeout: Seconds to wait for a receipt; None waits until it
            appears (no implicit limit)
        poll_interval: Seconds between eth_getTransactionReceipt polls
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        receipt_timeout: Optional[float] = None,
        poll_interval: float = 1.0
    ):
        self.w3 = w3
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval

    @classmethod
    def from_rpc_url(cls, rpc_url: str, receipt_timeout: Optional[float] = None) -> "Web3SigningProvider":
        return cls(AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url)), receipt_timeout)

    async def send_transaction(self, descriptor: TransactionDescriptor) -> str:
        tx_hash = await self.w3.eth.send_transaction(descriptor.to_tx_params())
        tx_hash_hex = _hex(tx_hash)
        logger.info(f"Submitted transaction {tx_hash_hex} to {descriptor.to}")
        return tx_hash_hex

    async def wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        """
        Poll for the receipt of a submitted transaction.

        Raises:
            TimeExhausted: receipt_timeout is set and elapsed first
        """
        loop = asyncio.get_running_loop()
        deadline = None if self.receipt_timeout is None else loop.time() + self.receipt_timeout

        while True:
            try:
                receipt = await self.w3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                receipt = None

            if receipt is not None:
                return dict(receipt)

            if deadline is not None and loop.time() >= deadline:
                raise TimeExhausted(
                    f"Transaction {tx_hash} not in chain after {self.receipt_timeout} seconds"
                )
            await asyncio.sleep(self.poll_interval)
