"""Tests for block-scanning transaction history."""

from __future__ import annotations

import pytest

from ipckit.chain.client import ChainClient
from ipckit.chain.history import TransactionHistory
from ipckit.models import Address, NetworkEndpoint

from conftest import FakeNode, tx_hash

ME = "0xab5c8051b9a1df1aab0149f8b0630848b7ecabf6"
OTHER = "0x2cc31912b2b0f3075a87b3640923d45a26cef3ee"
STRANGER = "0x1f4e7db8514ec4e99467a8d2ee3a63094a904e7a"


def _block(number: int) -> dict:
    """Block ``n`` holds one tx from ME on multiples of 10, one to ME on multiples of 25."""
    txs = []
    if number % 10 == 0:
        txs.append({"hash": tx_hash(number * 2), "from": ME, "to": OTHER, "value": "0x1", "blockNumber": hex(number)})
    if number % 25 == 0:
        txs.append({"hash": tx_hash(number * 2 + 1), "from": STRANGER, "to": ME, "value": "0x2", "blockNumber": hex(number)})
    txs.append({"hash": tx_hash(10_000 + number), "from": STRANGER, "to": OTHER, "value": "0x0", "blockNumber": hex(number)})
    return {"number": hex(number), "hash": tx_hash(50_000 + number), "transactions": txs}


@pytest.fixture()
def chain_node(node: FakeNode) -> FakeNode:
    node.on("eth_blockNumber", "0xfa")  # 250
    node.on("eth_getBlockByNumber", lambda params: _block(int(params[0], 16)))
    return node


class TestHistory:
    @pytest.mark.asyncio
    async def test_default_window_includes_latest(
        self, chain: ChainClient, chain_node: FakeNode, endpoint: NetworkEndpoint
    ) -> None:
        found = await chain.history.scan(endpoint, Address.from_hex(ME))

        requested = sorted(int(params[0], 16) for params in chain_node.calls_to("eth_getBlockByNumber"))
        assert requested == list(range(150, 251))
        assert all(params[1] is True for params in chain_node.calls_to("eth_getBlockByNumber"))

        blocks = {tx.block_number for tx in found}
        assert blocks == {n for n in range(150, 251) if n % 10 == 0 or n % 25 == 0}
        assert len(found) == len([n for n in range(150, 251) if n % 10 == 0]) + len(
            [n for n in range(150, 251) if n % 25 == 0]
        )

    @pytest.mark.asyncio
    async def test_explicit_start_block(
        self, chain: ChainClient, chain_node: FakeNode, endpoint: NetworkEndpoint
    ) -> None:
        found = await chain.history.scan(endpoint, Address.from_hex(ME), start_block=240)
        assert len(chain_node.calls_to("eth_getBlockByNumber")) == 11
        assert {tx.hash.hex for tx in found} == {tx_hash(480), tx_hash(500), tx_hash(501)}

    @pytest.mark.asyncio
    async def test_young_chain_starts_at_genesis(self, chain: ChainClient, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        node.on("eth_blockNumber", "0x5")
        node.on("eth_getBlockByNumber", lambda params: _block(int(params[0], 16)))
        found = await chain.history.scan(endpoint, Address.from_hex(ME))
        assert sorted(int(p[0], 16) for p in node.calls_to("eth_getBlockByNumber")) == [0, 1, 2, 3, 4, 5]
        assert {tx.block_number for tx in found} == {0}

    @pytest.mark.asyncio
    async def test_missing_blocks_are_skipped(self, chain: ChainClient, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        node.on("eth_getBlockByNumber", None)
        found = await chain.history.scan(endpoint, Address.from_hex(ME), start_block=1, end_block=3)
        assert found == []
        assert node.calls_to("eth_blockNumber") == []

    @pytest.mark.asyncio
    async def test_bounded_concurrency(self, chain: ChainClient, chain_node: FakeNode, endpoint: NetworkEndpoint) -> None:
        history = TransactionHistory(chain.rpc, window=20, max_concurrency=2)
        found = await history.scan(endpoint, Address.from_hex(ME))
        assert len(chain_node.calls_to("eth_getBlockByNumber")) == 21
        assert {tx.block_number for tx in found} == {230, 240, 250}
