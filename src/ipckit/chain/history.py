"""
Transaction history by block scanning.

There is no index to ask "which transactions touched this address", so
the scanner fetches every block in a window concurrently and filters the
full transaction lists locally.  Result order is not significant.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..models import Address, BlockInfo, NetworkEndpoint, TransactionInfo
from .eth import EthRpc

logger = logging.getLogger("ipckit.chain.history")

DEFAULT_WINDOW = 100
DEFAULT_MAX_CONCURRENCY = 16


class TransactionHistory:
    def __init__(
        self,
        rpc: EthRpc,
        window: int = DEFAULT_WINDOW,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self.rpc = rpc
        self.window = window
        self.max_concurrency = max_concurrency

    async def scan(
        self,
        endpoint: NetworkEndpoint,
        address: Address,
        start_block: int = 0,
        end_block: Optional[int] = None,
    ) -> list[TransactionInfo]:
        """
        Transactions sent from or to ``address``.

        Args:
            endpoint: Network to scan
            address: Account to match against ``from``/``to``
            start_block: First block; <= 0 means ``latest - window``
            end_block: Last block, inclusive (default: latest)
        """
        if end_block is None:
            end_block = await self.rpc.block_number(endpoint)
        start = start_block if start_block > 0 else max(0, end_block - self.window)

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def fetch(number: int) -> Optional[BlockInfo]:
            async with semaphore:
                return await self.rpc.get_block_by_number(endpoint, number, full=True)

        logger.debug(f"scanning blocks {start}..{end_block} on {endpoint.name} for {address}")
        blocks = await asyncio.gather(*(fetch(n) for n in range(start, end_block + 1)))

        return [
            tx
            for block in blocks
            if block is not None
            for tx in block.transactions
            if tx.touches(address)
        ]
