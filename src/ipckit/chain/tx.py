"""
Transaction Builder / Broadcaster - build, sign, and send transactions.

Two custody modes:

* node custody: ``send_transaction`` hands an unsigned transaction to
  ``eth_sendTransaction`` and the node signs with a key it holds
* local custody: ``send_raw_transaction`` fills gas, assigns the nonce and
  chain id, has a ``Signer`` sign, and submits ``eth_sendRawTransaction``

The nonce and chain id are written by the broadcaster only, right before
signing; the builder never sets them.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from ..config import DEFAULT_GAS_LIMIT
from ..errors import RpcError
from ..keys import Signer
from ..models import Address, Hash, NetworkEndpoint, Transaction
from .abi import ContractInterface, ContractRegistry
from .eth import EthRpc
from .nonce import NonceManager

logger = logging.getLogger("ipckit.chain.tx")

ContractRef = Union[str, ContractInterface]


class TransactionBuilder:
    def __init__(
        self,
        rpc: EthRpc,
        contracts: Optional[ContractRegistry] = None,
        default_gas_limit: int = DEFAULT_GAS_LIMIT,
    ) -> None:
        self.rpc = rpc
        self.contracts = contracts or ContractRegistry()
        self.default_gas_limit = default_gas_limit

    def resolve(self, contract: ContractRef) -> ContractInterface:
        if isinstance(contract, ContractInterface):
            return contract
        return self.contracts.load(contract)

    def build_call(
        self,
        contract: ContractRef,
        method_name: str,
        args: list[Any],
        from_address: Address,
        to_contract: Optional[Address] = None,
        value: int = 0,
        gas_limit: Optional[int] = None,
    ) -> Transaction:
        """
        Build a contract call, or a deployment when ``to_contract`` is None.

        Args:
            contract: Contract name (resolved in the registry) or interface
            method_name: Function to call (ignored for deployments)
            args: Function arguments
            from_address: Sending account
            to_contract: Deployed contract address; None deploys the bytecode
            value: Wei to attach
            gas_limit: Gas limit (default: conservative constant, no estimation)

        Raises:
            ContractNotFound: Unknown contract, or deployment without bytecode
            MethodNotFound: ``method_name`` is not in the interface
        """
        interface = self.resolve(contract)
        if to_contract is not None:
            to_address = to_contract
            data = interface.encode_call(method_name, args)
        else:
            to_address = from_address
            data = interface.deploy_data

        return Transaction(
            from_address=from_address,
            to_address=to_address,
            value=value,
            data=data,
            gas_limit=gas_limit or self.default_gas_limit,
        )

    def build_transfer(
        self,
        from_address: Address,
        to_address: Address,
        value: int,
        gas_limit: int = 21_000,
    ) -> Transaction:
        return Transaction(
            from_address=from_address,
            to_address=to_address,
            value=value,
            gas_limit=gas_limit,
        )

    async def estimate_gas(self, endpoint: NetworkEndpoint, tx: Transaction) -> int:
        """Ask the node for a gas estimate; the caller decides whether to apply it."""
        return await self.rpc.estimate_gas(endpoint, tx)


class TransactionBroadcaster:
    def __init__(
        self,
        rpc: EthRpc,
        nonces: NonceManager,
        default_gas_limit: int = DEFAULT_GAS_LIMIT,
    ) -> None:
        self.rpc = rpc
        self.nonces = nonces
        self.default_gas_limit = default_gas_limit

    async def send_transaction(self, endpoint: NetworkEndpoint, tx: Transaction) -> Hash:
        """Submit an unsigned transaction for the node to sign (node custody)."""
        tx_hash = await self.rpc.send_transaction(endpoint, tx)
        logger.info(f"{endpoint.name}: eth_sendTransaction from {tx.from_address} -> {tx_hash}")
        return tx_hash

    async def send_raw_transaction(
        self,
        endpoint: NetworkEndpoint,
        account: Signer,
        tx: Transaction,
    ) -> Hash:
        """
        Sign locally and submit (local custody).

        Holds the account's nonce lock from nonce assignment until the node
        has accepted the transaction, so concurrent sends are serialized.
        A rejection drops the cached nonce for the account.
        """
        address = account.address
        async with self.nonces.lock(address):
            if not tx.gas_limit:
                tx.gas_limit = self.default_gas_limit
            if not tx.gas_price:
                tx.gas_price = await self.rpc.gas_price(endpoint)
            if not self.nonces.known(address):
                await self.nonces.refresh(endpoint, address)

            tx.nonce = self.nonces.next(address)
            tx.chain_id = endpoint.chain_id
            raw = account.sign_transaction(tx.to_signable())
            tx.raw_transaction = raw

            try:
                tx_hash = await self.rpc.send_raw_transaction(endpoint, raw)
            except RpcError:
                # next send reloads the pending count from the node
                self.nonces.forget(address)
                raise
            self.nonces.advance(address)

        logger.info(
            f"{endpoint.name}: eth_sendRawTransaction from {address} nonce={tx.nonce} -> {tx_hash}"
        )
        return tx_hash

    async def call(self, endpoint: NetworkEndpoint, tx: Transaction) -> bytes:
        """Read-only execution (eth_call at latest)."""
        return await self.rpc.call(endpoint, tx)
