"""
Typed eth_* / net_* / web3_* stubs over the raw transport.

Each stub converts hex quantities and hashes into Python values and turns
malformed results into ``SchemaError``.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from ..errors import SchemaError
from ..models import (
    Address,
    BlockInfo,
    BlockTag,
    Hash,
    NetworkEndpoint,
    Transaction,
    TransactionInfo,
    TransactionReceipt,
    block_tag,
)
from ..utils import from_quantity, hex_to_bytes
from .rpc import RpcTransport

Tag = Union[BlockTag, int]


def _quantity(method: str, result: Any) -> int:
    try:
        return from_quantity(result)
    except ValueError as exc:
        raise SchemaError(f"{method}: {exc}") from exc


def _data(method: str, result: Any) -> bytes:
    if not isinstance(result, str) or not result.startswith("0x"):
        raise SchemaError(f"{method}: expected hex data, got {result!r}")
    try:
        return hex_to_bytes(result)
    except ValueError as exc:
        raise SchemaError(f"{method}: {exc}") from exc


def _string(method: str, result: Any) -> str:
    if not isinstance(result, str):
        raise SchemaError(f"{method}: expected a string, got {result!r}")
    return result


class EthRpc:
    def __init__(self, transport: RpcTransport) -> None:
        self.transport = transport

    async def client_version(self, endpoint: NetworkEndpoint) -> str:
        return _string("web3_clientVersion", await self.transport.call(endpoint, "web3_clientVersion", []))

    async def net_version(self, endpoint: NetworkEndpoint) -> str:
        return _string("net_version", await self.transport.call(endpoint, "net_version", []))

    async def block_number(self, endpoint: NetworkEndpoint) -> int:
        return _quantity("eth_blockNumber", await self.transport.call(endpoint, "eth_blockNumber", []))

    async def gas_price(self, endpoint: NetworkEndpoint) -> int:
        return _quantity("eth_gasPrice", await self.transport.call(endpoint, "eth_gasPrice", []))

    async def get_balance(
        self, endpoint: NetworkEndpoint, address: Address, tag: Tag = BlockTag.LATEST
    ) -> int:
        result = await self.transport.call(endpoint, "eth_getBalance", [address.checksum, block_tag(tag)])
        return _quantity("eth_getBalance", result)

    async def get_transaction_count(
        self, endpoint: NetworkEndpoint, address: Address, tag: Tag = BlockTag.LATEST
    ) -> int:
        result = await self.transport.call(
            endpoint, "eth_getTransactionCount", [address.checksum, block_tag(tag)]
        )
        return _quantity("eth_getTransactionCount", result)

    async def get_code(
        self, endpoint: NetworkEndpoint, address: Address, tag: Tag = BlockTag.LATEST
    ) -> bytes:
        result = await self.transport.call(endpoint, "eth_getCode", [address.checksum, block_tag(tag)])
        return _data("eth_getCode", result)

    async def estimate_gas(self, endpoint: NetworkEndpoint, tx: Transaction) -> int:
        result = await self.transport.call(endpoint, "eth_estimateGas", [tx.to_rpc_object()])
        return _quantity("eth_estimateGas", result)

    async def call(
        self, endpoint: NetworkEndpoint, tx: Transaction, tag: Tag = BlockTag.LATEST
    ) -> bytes:
        result = await self.transport.call(endpoint, "eth_call", [tx.to_rpc_object(), block_tag(tag)])
        return _data("eth_call", result)

    async def get_transaction_receipt(
        self, endpoint: NetworkEndpoint, tx_hash: Hash
    ) -> Optional[TransactionReceipt]:
        """Receipt for ``tx_hash``, or ``None`` while the node has not mined it."""
        result = await self.transport.call(endpoint, "eth_getTransactionReceipt", [tx_hash.hex])
        if result is None:
            return None
        return TransactionReceipt.from_rpc(result)

    async def get_transaction(
        self, endpoint: NetworkEndpoint, tx_hash: Hash
    ) -> Optional[TransactionInfo]:
        result = await self.transport.call(endpoint, "eth_getTransactionByHash", [tx_hash.hex])
        if result is None:
            return None
        return TransactionInfo.from_rpc(result)

    async def get_block_by_number(
        self, endpoint: NetworkEndpoint, tag: Tag, full: bool = True
    ) -> Optional[BlockInfo]:
        result = await self.transport.call(endpoint, "eth_getBlockByNumber", [block_tag(tag), full])
        if result is None:
            return None
        return BlockInfo.from_rpc(result)

    async def send_transaction(self, endpoint: NetworkEndpoint, tx: Transaction) -> Hash:
        result = await self.transport.call(endpoint, "eth_sendTransaction", [tx.to_rpc_object()])
        return Hash.from_hex(result)

    async def send_raw_transaction(self, endpoint: NetworkEndpoint, raw: bytes) -> Hash:
        result = await self.transport.call(endpoint, "eth_sendRawTransaction", ["0x" + raw.hex()])
        return Hash.from_hex(result)


__all__ = ["EthRpc", "Tag"]
