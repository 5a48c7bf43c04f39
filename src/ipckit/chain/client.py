"""
ChainClient - one object wiring the chain layer together.

Owns the transport and hands the same ``EthRpc`` to the nonce manager,
builder, broadcaster, receipt waiter and history scanner, so one nonce
cache is shared by everything that sends from this process.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from ..config import DEFAULT_GAS_LIMIT, Settings
from ..keys import Signer
from ..models import Address, NetworkEndpoint
from .abi import ContractRegistry
from .eth import EthRpc
from .history import TransactionHistory
from .logs import LogDecoder
from .nonce import NonceManager
from .receipts import CancelToken, ReceiptWaiter
from .rpc import RpcTransport
from .tx import ContractRef, TransactionBroadcaster, TransactionBuilder


class ChainClient:
    def __init__(
        self,
        transport: Optional[RpcTransport] = None,
        contracts: Optional[ContractRegistry] = None,
        settings: Optional[Settings] = None,
        waiter: Optional[ReceiptWaiter] = None,
    ) -> None:
        self.transport = transport or RpcTransport()
        self.rpc = EthRpc(self.transport)
        gas_limit = settings.default_gas_limit if settings else DEFAULT_GAS_LIMIT

        self.nonces = NonceManager(self.rpc)
        self.builder = TransactionBuilder(self.rpc, contracts, default_gas_limit=gas_limit)
        self.broadcaster = TransactionBroadcaster(self.rpc, self.nonces, default_gas_limit=gas_limit)
        if waiter is None and settings is not None:
            waiter = ReceiptWaiter(
                self.rpc,
                poll_interval=settings.receipts.poll_interval,
                max_attempts=settings.receipts.max_attempts,
                timeout=settings.receipts.timeout,
            )
        self.waiter = waiter or ReceiptWaiter(self.rpc)
        self.logs = LogDecoder()
        self.history = TransactionHistory(self.rpc)

    @classmethod
    def with_http_client(cls, http_client: httpx.AsyncClient, **kwargs: Any) -> "ChainClient":
        return cls(transport=RpcTransport(http_client), **kwargs)

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> "ChainClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def call_contract(
        self,
        endpoint: NetworkEndpoint,
        sender: Address,
        contract: ContractRef,
        method_name: str,
        args: list[Any],
        contract_address: Address,
    ) -> Any:
        """Read from a deployed contract (eth_call) and decode the outputs."""
        interface = self.builder.resolve(contract)
        tx = self.builder.build_call(interface, method_name, args, sender, contract_address)
        raw = await self.broadcaster.call(endpoint, tx)
        if not raw:
            return None
        return interface.decode_result(method_name, raw)

    async def send_contract_transaction(
        self,
        endpoint: NetworkEndpoint,
        account: Signer,
        contract: ContractRef,
        method_name: str,
        args: list[Any],
        contract_address: Optional[Address],
        cancel: Optional[CancelToken] = None,
    ) -> list[str]:
        """Sign locally and send; returns the addresses carried in the receipt log data."""
        tx = self.builder.build_call(contract, method_name, args, account.address, contract_address)
        tx_hash = await self.broadcaster.send_raw_transaction(endpoint, account, tx)
        receipt = await self.waiter.wait(endpoint, tx_hash, cancel)
        return self.logs.addresses_from_data(receipt.logs)

    async def send_meta_transaction(
        self,
        endpoint: NetworkEndpoint,
        sender: Address,
        contract: ContractRef,
        method_name: str,
        args: list[Any],
        contract_address: Optional[Address],
        cancel: Optional[CancelToken] = None,
    ) -> list[str]:
        """Node-custody send; returns the addresses carried in the receipt log data."""
        tx = self.builder.build_call(contract, method_name, args, sender, contract_address)
        tx_hash = await self.broadcaster.send_transaction(endpoint, tx)
        receipt = await self.waiter.wait(endpoint, tx_hash, cancel)
        return self.logs.addresses_from_data(receipt.logs)
