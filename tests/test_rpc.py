"""Tests for the JSON-RPC transport and typed eth_* stubs."""

from __future__ import annotations

import httpx
import pytest

from ipckit.chain.eth import EthRpc
from ipckit.chain.rpc import REQUEST_ID, RpcTransport
from ipckit.errors import RpcError, SchemaError, TransportError
from ipckit.models import Address, BlockTag, Hash, NetworkEndpoint, Transaction

from conftest import FakeNode, NodeError, mock_client, tx_hash

SENDER = "0xab5c8051b9a1df1aab0149f8b0630848b7ecabf6"


def _rpc(node: FakeNode) -> EthRpc:
    return EthRpc(RpcTransport(mock_client(node)))


class TestTransport:
    @pytest.mark.asyncio
    async def test_request_envelope(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        node.on("eth_blockNumber", "0x10")
        assert await _rpc(node).block_number(endpoint) == 16
        assert node.calls == [("eth_blockNumber", [])]
        assert node.ids == [REQUEST_ID]

    @pytest.mark.asyncio
    async def test_error_object_becomes_rpc_error(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        def reject(params: list) -> None:
            raise NodeError(-32000, "insufficient funds for gas * price + value")

        node.on("eth_sendRawTransaction", reject)
        with pytest.raises(RpcError) as exc_info:
            await _rpc(node).send_raw_transaction(endpoint, b"\x01")
        assert exc_info.value.code == -32000
        assert exc_info.value.method == "eth_sendRawTransaction"
        assert "insufficient funds" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_unknown_method(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        with pytest.raises(RpcError):
            await _rpc(node).client_version(endpoint)

    @pytest.mark.asyncio
    async def test_http_status_is_transport_error(self, endpoint: NetworkEndpoint) -> None:
        client = mock_client(lambda request: httpx.Response(502, text="bad gateway"))
        with pytest.raises(TransportError):
            await RpcTransport(client).call(endpoint, "eth_blockNumber", [])

    @pytest.mark.asyncio
    async def test_connection_failure_is_transport_error(self, endpoint: NetworkEndpoint) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError):
            await RpcTransport(mock_client(refuse)).call(endpoint, "eth_blockNumber", [])

    @pytest.mark.asyncio
    async def test_non_json_body_is_schema_error(self, endpoint: NetworkEndpoint) -> None:
        client = mock_client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(SchemaError):
            await RpcTransport(client).call(endpoint, "eth_blockNumber", [])

    @pytest.mark.asyncio
    async def test_missing_result(self, endpoint: NetworkEndpoint) -> None:
        client = mock_client(lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 42}))
        with pytest.raises(RpcError):
            await RpcTransport(client).call(endpoint, "eth_blockNumber", [])

    @pytest.mark.asyncio
    async def test_injected_client_stays_open(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        client = mock_client(node)
        async with RpcTransport(client):
            pass
        assert not client.is_closed


class TestEthRpc:
    @pytest.mark.asyncio
    async def test_transaction_count_uses_tag(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        node.on("eth_getTransactionCount", "0x7")
        count = await _rpc(node).get_transaction_count(endpoint, Address.from_hex(SENDER), BlockTag.PENDING)
        assert count == 7
        assert node.calls_to("eth_getTransactionCount") == [[Address.from_hex(SENDER).checksum, "pending"]]

    @pytest.mark.asyncio
    async def test_balance_at_block_number(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        node.on("eth_getBalance", "0xde0b6b3a7640000")
        balance = await _rpc(node).get_balance(endpoint, Address.from_hex(SENDER), 12345)
        assert balance == 10**18
        assert node.calls_to("eth_getBalance")[0][1] == "0x3039"

    @pytest.mark.asyncio
    async def test_quantity_shape_is_checked(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        node.on("eth_gasPrice", 20)
        with pytest.raises(SchemaError):
            await _rpc(node).gas_price(endpoint)

    @pytest.mark.asyncio
    async def test_receipt_null_is_none(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        node.on("eth_getTransactionReceipt", None)
        assert await _rpc(node).get_transaction_receipt(endpoint, Hash.from_hex(tx_hash(1))) is None

    @pytest.mark.asyncio
    async def test_send_transaction_returns_hash(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        node.on("eth_sendTransaction", tx_hash(9))
        tx = Transaction(from_address=Address.from_hex(SENDER), value=5)
        result = await _rpc(node).send_transaction(endpoint, tx)
        assert result.hex == tx_hash(9)
        assert node.calls_to("eth_sendTransaction")[0][0]["value"] == "0x5"

    @pytest.mark.asyncio
    async def test_call_returns_bytes(self, node: FakeNode, endpoint: NetworkEndpoint) -> None:
        node.on("eth_call", "0x" + "00" * 31 + "2a")
        tx = Transaction(from_address=Address.from_hex(SENDER), to_address=Address.from_hex(SENDER))
        data = await _rpc(node).call(endpoint, tx)
        assert int.from_bytes(data, "big") == 42
        assert node.calls_to("eth_call")[0][1] == "latest"
