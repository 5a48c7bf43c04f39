"""Tests for the per-account nonce cache."""

from __future__ import annotations

import pytest

from ipckit.chain.eth import EthRpc
from ipckit.chain.nonce import NonceManager
from ipckit.chain.rpc import RpcTransport
from ipckit.errors import NonceError
from ipckit.models import Address, NetworkEndpoint

from conftest import FakeNode, mock_client

ALICE = Address.from_hex("0xab5c8051b9a1df1aab0149f8b0630848b7ecabf6")
BOB = Address.from_hex("0x2cc31912b2b0f3075a87b3640923d45a26cef3ee")


def _manager(node: FakeNode) -> NonceManager:
    return NonceManager(EthRpc(RpcTransport(mock_client(node))))


class TestNonceManager:
    def test_next_before_refresh_fails(self, node: FakeNode) -> None:
        with pytest.raises(NonceError):
            _manager(node).next(ALICE)

    @pytest.mark.asyncio
    async def test_refresh_reads_pending_count(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        node.on("eth_getTransactionCount", "0x5")
        nonces = _manager(node)
        assert await nonces.refresh(endpoint, ALICE) == 5
        assert nonces.next(ALICE) == 5
        assert node.calls_to("eth_getTransactionCount")[0][1] == "pending"

    @pytest.mark.asyncio
    async def test_advance_is_monotonic(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        node.on("eth_getTransactionCount", "0x5")
        nonces = _manager(node)
        await nonces.refresh(endpoint, ALICE)
        assert nonces.advance(ALICE) == 6
        assert nonces.advance(ALICE) == 7
        assert nonces.next(ALICE) == 7

    @pytest.mark.asyncio
    async def test_accounts_are_independent(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        node.on("eth_getTransactionCount", lambda params: "0x1" if params[0] == ALICE.checksum else "0x9")
        nonces = _manager(node)
        await nonces.refresh(endpoint, ALICE)
        await nonces.refresh(endpoint, BOB)
        nonces.advance(ALICE)
        assert nonces.next(ALICE) == 2
        assert nonces.next(BOB) == 9

    @pytest.mark.asyncio
    async def test_forget(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        node.on("eth_getTransactionCount", "0x1")
        nonces = _manager(node)
        await nonces.refresh(endpoint, ALICE)
        nonces.forget(ALICE)
        assert not nonces.known(ALICE)

    def test_one_lock_per_account(self, node: FakeNode) -> None:
        nonces = _manager(node)
        assert nonces.lock(ALICE) is nonces.lock(Address.from_hex(ALICE.checksum))
        assert nonces.lock(ALICE) is not nonces.lock(BOB)
