"""
Per-account nonce cache.

``refresh`` loads the node's ``pending`` transaction count; ``advance``
bumps the cached value after a successful submission so back-to-back
sends never reuse a nonce.  Callers that assign and submit must hold
``lock(address)`` for the whole refresh → sign → submit → advance span.
"""

from __future__ import annotations

import asyncio
import logging

from ..errors import NonceError
from ..models import Address, BlockTag, NetworkEndpoint
from .eth import EthRpc

logger = logging.getLogger("ipckit.chain.nonce")


class NonceManager:
    def __init__(self, rpc: EthRpc) -> None:
        self.rpc = rpc
        self._nonces: dict[bytes, int] = {}
        self._locks: dict[bytes, asyncio.Lock] = {}

    def lock(self, address: Address) -> asyncio.Lock:
        lock = self._locks.get(address.value)
        if lock is None:
            lock = self._locks[address.value] = asyncio.Lock()
        return lock

    def known(self, address: Address) -> bool:
        return address.value in self._nonces

    async def refresh(self, endpoint: NetworkEndpoint, address: Address) -> int:
        """Store and return the node's pending transaction count for ``address``."""
        nonce = await self.rpc.get_transaction_count(endpoint, address, BlockTag.PENDING)
        self._nonces[address.value] = nonce
        logger.debug(f"nonce for {address} refreshed to {nonce}")
        return nonce

    def next(self, address: Address) -> int:
        try:
            return self._nonces[address.value]
        except KeyError:
            raise NonceError(f"No nonce loaded for {address}; refresh first") from None

    def advance(self, address: Address) -> int:
        nonce = self.next(address) + 1
        self._nonces[address.value] = nonce
        return nonce

    def forget(self, address: Address) -> None:
        self._nonces.pop(address.value, None)
