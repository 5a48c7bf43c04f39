"""
Shared fixtures: a scripted JSON-RPC node behind ``httpx.MockTransport``.

``FakeNode`` answers by RPC method.  A handler is either a fixed result,
a list of results consumed one per call (the last one repeats), or a
callable taking the params list.  Raise ``NodeError`` from a callable to
answer with a JSON-RPC error object.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from ipckit.chain.abi import ContractRegistry
from ipckit.chain.client import ChainClient
from ipckit.chain.receipts import ReceiptWaiter
from ipckit.models import NetworkEndpoint

RPC_URL = "http://node.test:8545"
IDENTITY_MANAGER = "0x7c338672f483795eca47106dc395660d95041dbe"
REGISTRY = "0x2cc31912b2b0f3075a87b3640923d45a26cef3ee"
TEST_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
TEST_KEY_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


class NodeError(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class FakeNode:
    def __init__(self) -> None:
        self.handlers: dict[str, Any] = {}
        self.calls: list[tuple[str, list[Any]]] = []
        self.ids: list[Any] = []

    def on(self, method: str, result: Any) -> "FakeNode":
        self.handlers[method] = result
        return self

    def calls_to(self, method: str) -> list[list[Any]]:
        return [params for name, params in self.calls if name == method]

    def _result(self, method: str, params: list[Any]) -> Any:
        handler = self.handlers[method]
        if callable(handler):
            return handler(params)
        if isinstance(handler, list):
            index = len(self.calls_to(method)) - 1
            return handler[min(index, len(handler) - 1)]
        return handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method, params = body["method"], body["params"]
        self.calls.append((method, params))
        self.ids.append(body["id"])

        if method not in self.handlers:
            error = {"code": -32601, "message": f"the method {method} does not exist"}
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": error})
        try:
            result = self._result(method, params)
        except NodeError as exc:
            error = {"code": exc.code, "message": exc.message}
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": error})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def receipt_payload(tx_hash: str, block_number: str | None = "0x3039", logs: list[dict] | None = None) -> dict:
    return {
        "transactionHash": tx_hash,
        "blockNumber": block_number,
        "status": "0x1",
        "contractAddress": None,
        "logs": logs or [],
    }


def tx_hash(n: int) -> str:
    return "0x" + f"{n:064x}"


def word(address: str) -> str:
    """Left-pad an address into a 32-byte topic/data word (no 0x)."""
    return address.lower().removeprefix("0x").rjust(64, "0")


@pytest.fixture()
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture()
def endpoint() -> NetworkEndpoint:
    return NetworkEndpoint(
        name="local",
        network_id=0xFF,
        rpc_url=RPC_URL,
        identity_manager_address=IDENTITY_MANAGER,
        registry_address=REGISTRY,
        chain_id=1337,
    )


@pytest.fixture()
def chain(node: FakeNode) -> ChainClient:
    """Chain client wired to the fake node, polling without delay."""
    client = ChainClient.with_http_client(mock_client(node))
    client.waiter = ReceiptWaiter(client.rpc, poll_interval=0, max_attempts=5)
    return client


@pytest.fixture()
def contracts_dir(tmp_path: Path) -> Path:
    """A contracts directory with a deployable Truffle-style artifact."""
    root = tmp_path / "contracts"
    root.mkdir()
    artifact = {
        "contract_name": "Greeter",
        "abi": [
            {
                "type": "function",
                "name": "greet",
                "inputs": [{"name": "who", "type": "address"}],
                "outputs": [{"name": "", "type": "uint256"}],
            },
            {"type": "constructor", "inputs": []},
        ],
        "unlinked_binary": "0x6080604052",
    }
    (root / "Greeter.json").write_text(json.dumps(artifact), encoding="utf-8")
    return root


@pytest.fixture()
def contracts(contracts_dir: Path) -> ContractRegistry:
    return ContractRegistry(contracts_dir)
