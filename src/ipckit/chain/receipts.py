"""
Receipt polling.

``ReceiptWaiter.wait`` polls ``eth_getTransactionReceipt`` until the
transaction is in a block.  A ``null`` result or a receipt without a block
number means "not mined yet" and polling continues; RPC failures end the
wait immediately.  Polling is bounded by ``max_attempts`` and an optional
wall-clock ``timeout``, and can be interrupted between polls through a
``CancelToken``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

from ..config import DEFAULT_MAX_ATTEMPTS, DEFAULT_POLL_INTERVAL
from ..errors import FlowCancelled, ReceiptTimeout
from ..models import Hash, NetworkEndpoint, TransactionReceipt
from .eth import EthRpc

logger = logging.getLogger("ipckit.chain.receipts")


class CancelToken:
    """Cooperative cancellation shared between a flow and its pollers."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise FlowCancelled(self.reason or "cancelled")

    async def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds`` unless cancelled first (then raise FlowCancelled)."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled()


class ReceiptWaiter:
    def __init__(
        self,
        rpc: EthRpc,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        timeout: Optional[float] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.rpc = rpc
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.timeout = timeout

    async def wait(
        self,
        endpoint: NetworkEndpoint,
        tx_hash: Hash,
        cancel: Optional[CancelToken] = None,
    ) -> TransactionReceipt:
        """
        Wait for a transaction receipt.

        Args:
            endpoint: Network the transaction was sent to
            tx_hash: Transaction hash; the zero hash returns an empty receipt
                without touching the network
            cancel: Optional token to abandon the wait

        Returns:
            The first receipt whose block number is > 0

        Raises:
            ReceiptTimeout: Not mined within max_attempts / timeout
            FlowCancelled: ``cancel`` fired
        """
        if tx_hash.is_zero:
            return TransactionReceipt.empty()

        cancel = cancel or CancelToken()
        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        attempts = 0

        while True:
            cancel.raise_if_cancelled()
            attempts += 1
            receipt = await self.rpc.get_transaction_receipt(endpoint, tx_hash)
            if receipt is not None and not receipt.pending:
                logger.info(f"{tx_hash} mined in block {receipt.block_number} after {attempts} polls")
                return receipt
            logger.debug(f"{tx_hash} not mined yet (poll {attempts}/{self.max_attempts})")

            if attempts >= self.max_attempts:
                raise ReceiptTimeout(tx_hash.hex, attempts)
            delay = self.poll_interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise ReceiptTimeout(tx_hash.hex, attempts)
                delay = min(delay, remaining)
            await cancel.sleep(delay)
