"""
Value types shared by the chain, identity and CLI layers.

Addresses and hashes are byte-valued: two ``Address`` objects are equal
when their 20 bytes are equal, whatever case their hex form was written
in.  Receipts, blocks and transactions are parsed from raw JSON-RPC
dicts here so that shape errors surface as ``SchemaError`` in one place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional, Union

from .errors import SchemaError
from .utils import (
    bytes_to_hex,
    from_quantity,
    hex_to_bytes,
    int_to_min_bytes,
    to_checksum_address,
    to_quantity,
)


class NetworkId(IntEnum):
    NONE = 0x00
    HOMESTEAD = 0x01
    ROPSTEN = 0x03
    RINKEBY = 0x04
    KOVAN = 0x2A
    CARECHAIN = 0xA18E
    LOCAL = 0xFF


@dataclass(frozen=True)
class NetworkEndpoint:
    name: str
    network_id: int
    rpc_url: str
    identity_manager_address: str = ""
    registry_address: str = ""
    faucet_url_template: str = ""
    faucet_http_method: str = "POST"
    chain_id: Optional[int] = None

    @property
    def mnid_chain_id(self) -> bytes:
        return int_to_min_bytes(self.network_id)

    @property
    def has_faucet(self) -> bool:
        return bool(self.faucet_url_template)

    def identity_manager(self) -> Optional["Address"]:
        return Address.from_hex(self.identity_manager_address) if self.identity_manager_address else None

    def registry(self) -> Optional["Address"]:
        return Address.from_hex(self.registry_address) if self.registry_address else None


@dataclass(frozen=True)
class Address:
    value: bytes
    public_key: Optional[str] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if len(self.value) != 20:
            raise ValueError(f"Address must be 20 bytes, got {len(self.value)}")

    @classmethod
    def from_hex(cls, value: str, public_key: Optional[str] = None) -> "Address":
        try:
            raw = hex_to_bytes(value)
        except ValueError as exc:
            raise ValueError(f"Invalid address: {value!r}") from exc
        return cls(raw, public_key=public_key)

    @classmethod
    def zero(cls) -> "Address":
        return cls(b"\x00" * 20)

    @property
    def is_zero(self) -> bool:
        return self.value == b"\x00" * 20

    @property
    def checksum(self) -> str:
        return to_checksum_address(self.value.hex())

    @property
    def hex(self) -> str:
        return bytes_to_hex(self.value)

    def __str__(self) -> str:
        return self.checksum


@dataclass(frozen=True)
class Hash:
    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != 32:
            raise ValueError(f"Hash must be 32 bytes, got {len(self.value)}")

    @classmethod
    def from_hex(cls, value: Any) -> "Hash":
        if not isinstance(value, str) or not value.startswith("0x") or len(value) != 66:
            raise SchemaError(f"Not a 32-byte hash: {value!r}")
        try:
            return cls(bytes.fromhex(value[2:]))
        except ValueError as exc:
            raise SchemaError(f"Not a 32-byte hash: {value!r}") from exc

    @classmethod
    def zero(cls) -> "Hash":
        return cls(b"\x00" * 32)

    @property
    def is_zero(self) -> bool:
        return self.value == b"\x00" * 32

    @property
    def hex(self) -> str:
        return bytes_to_hex(self.value)

    def __str__(self) -> str:
        return self.hex


class BlockTag(str, Enum):
    PENDING = "pending"
    LATEST = "latest"
    EARLIEST = "earliest"


def block_tag(tag: Union[BlockTag, int]) -> str:
    """Wire form of a block reference.

    The three symbolic tags map to their literal names; any explicit block
    number, including 0, maps to a hex quantity.
    """
    if isinstance(tag, BlockTag):
        return tag.value
    if isinstance(tag, bool) or not isinstance(tag, int):
        raise TypeError(f"Block tag must be a BlockTag or int, got {type(tag).__name__}")
    return to_quantity(tag)


@dataclass
class Transaction:
    from_address: Address
    to_address: Optional[Address] = None
    value: int = 0
    data: bytes = b""
    gas_limit: int = 0
    gas_price: int = 0
    nonce: Optional[int] = None
    chain_id: Optional[int] = None
    raw_transaction: Optional[bytes] = None

    def to_rpc_object(self) -> dict[str, str]:
        """Transaction object for eth_sendTransaction / eth_call / eth_estimateGas."""
        obj: dict[str, str] = {"from": self.from_address.checksum}
        if self.to_address is not None:
            obj["to"] = self.to_address.checksum
        if self.value:
            obj["value"] = to_quantity(self.value)
        if self.data:
            obj["data"] = bytes_to_hex(self.data)
        if self.gas_limit:
            obj["gas"] = to_quantity(self.gas_limit)
        if self.gas_price:
            obj["gasPrice"] = to_quantity(self.gas_price)
        return obj

    def to_signable(self) -> dict[str, Any]:
        """Legacy transaction dict in the form eth-account signs."""
        if self.nonce is None:
            raise ValueError("Transaction nonce must be set before signing")
        tx: dict[str, Any] = {
            "nonce": self.nonce,
            "gas": self.gas_limit,
            "gasPrice": self.gas_price,
            "value": self.value,
            "data": bytes_to_hex(self.data),
        }
        if self.to_address is not None:
            tx["to"] = self.to_address.checksum
        if self.chain_id is not None:
            tx["chainId"] = self.chain_id
        return tx


@dataclass(frozen=True)
class LogEntry:
    address: Optional[str]
    data: str
    topics: tuple[str, ...] = ()

    @classmethod
    def from_rpc(cls, payload: Any) -> "LogEntry":
        if not isinstance(payload, dict):
            raise SchemaError(f"Log entry is not an object: {payload!r}")
        topics = payload.get("topics") or []
        if not isinstance(topics, list):
            raise SchemaError(f"Log topics is not a list: {topics!r}")
        for topic in topics:
            Hash.from_hex(topic)
        data = payload.get("data") or "0x"
        try:
            hex_to_bytes(data)
        except (TypeError, ValueError) as exc:
            raise SchemaError(f"Log data is not hex: {data!r}") from exc
        return cls(
            address=payload.get("address"),
            data=data,
            topics=tuple(topics),
        )


def _optional_quantity(payload: dict[str, Any], key: str) -> Optional[int]:
    value = payload.get(key)
    if value is None:
        return None
    try:
        return from_quantity(value)
    except ValueError as exc:
        raise SchemaError(f"{key}: {exc}") from exc


@dataclass(frozen=True)
class TransactionReceipt:
    transaction_hash: Optional[Hash] = None
    block_number: int = 0
    logs: tuple[LogEntry, ...] = ()
    status: Optional[int] = None
    contract_address: Optional[str] = None

    @classmethod
    def empty(cls) -> "TransactionReceipt":
        return cls()

    @property
    def pending(self) -> bool:
        return self.block_number <= 0

    @classmethod
    def from_rpc(cls, payload: Any) -> "TransactionReceipt":
        if not isinstance(payload, dict):
            raise SchemaError(f"Receipt is not an object: {payload!r}")
        raw_hash = payload.get("transactionHash")
        logs = payload.get("logs") or []
        if not isinstance(logs, list):
            raise SchemaError(f"Receipt logs is not a list: {logs!r}")
        return cls(
            transaction_hash=Hash.from_hex(raw_hash) if raw_hash else None,
            block_number=_optional_quantity(payload, "blockNumber") or 0,
            logs=tuple(LogEntry.from_rpc(entry) for entry in logs),
            status=_optional_quantity(payload, "status"),
            contract_address=payload.get("contractAddress"),
        )


@dataclass(frozen=True)
class TransactionInfo:
    hash: Hash
    from_address: Optional[Address]
    to_address: Optional[Address]
    value: int = 0
    block_number: Optional[int] = None

    @classmethod
    def from_rpc(cls, payload: Any) -> "TransactionInfo":
        if not isinstance(payload, dict):
            raise SchemaError(f"Transaction is not an object: {payload!r}")
        sender = payload.get("from")
        recipient = payload.get("to")
        try:
            return cls(
                hash=Hash.from_hex(payload.get("hash")),
                from_address=Address.from_hex(sender) if sender else None,
                to_address=Address.from_hex(recipient) if recipient else None,
                value=_optional_quantity(payload, "value") or 0,
                block_number=_optional_quantity(payload, "blockNumber"),
            )
        except ValueError as exc:
            raise SchemaError(str(exc)) from exc

    def touches(self, address: Address) -> bool:
        return self.from_address == address or self.to_address == address


@dataclass(frozen=True)
class BlockInfo:
    number: Optional[int]
    hash: Optional[Hash]
    transactions: tuple[TransactionInfo, ...] = ()

    @classmethod
    def from_rpc(cls, payload: Any) -> "BlockInfo":
        if not isinstance(payload, dict):
            raise SchemaError(f"Block is not an object: {payload!r}")
        raw_hash = payload.get("hash")
        txs = payload.get("transactions") or []
        # Hash-only lists (fullList=false) carry no sender/recipient to filter on.
        full = [TransactionInfo.from_rpc(tx) for tx in txs if isinstance(tx, dict)]
        return cls(
            number=_optional_quantity(payload, "number"),
            hash=Hash.from_hex(raw_hash) if raw_hash else None,
            transactions=tuple(full),
        )
