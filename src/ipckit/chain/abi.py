"""
ABI Loader - Loads contract interfaces from JSON build artifacts.

Artifacts live in a contracts directory, one per contract, in either
layout:

* Truffle: ``<dir>/<Name>.json`` with ``abi`` and ``unlinked_binary`` or
  ``bytecode`` (hex string)
* Foundry: ``<dir>/<Name>.sol/<Name>.json`` with ``abi`` and
  ``bytecode.object``

The package ships ABI-only artifacts for the identity manager and the
profile registry; point ``ContractRegistry`` at a build directory to get
deployable bytecode.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from eth_abi import decode, encode

from ..errors import ContractNotFound, MethodNotFound
from ..models import Address
from ..utils import hex_to_bytes, keccak256, strip_0x, to_checksum_address

PACKAGED_CONTRACTS = Path(__file__).resolve().parent.parent / "contracts"


def _coerce(abi_type: str, value: Any) -> Any:
    """Map loosely typed values (hex/decimal strings, Address) onto what eth-abi expects."""
    if isinstance(value, Address):
        return value.checksum if abi_type == "address" else value.value
    if abi_type.endswith("]"):
        inner = abi_type[: abi_type.rindex("[")]
        return [_coerce(inner, item) for item in value]
    if not isinstance(value, str):
        return value
    if abi_type == "address":
        return to_checksum_address(value)
    if abi_type.startswith(("uint", "int")):
        return int(value, 0)
    if abi_type.startswith("bytes"):
        return hex_to_bytes(value)
    if abi_type == "bool":
        return value.lower() == "true"
    return value


def _types(entries: list[dict[str, Any]]) -> list[str]:
    return [entry["type"] for entry in entries]


@dataclass(frozen=True)
class ContractInterface:
    name: str
    abi: list[dict[str, Any]] = field(repr=False)
    bytecode: str = field(default="0x", repr=False)

    def find(self, method_name: str) -> dict[str, Any]:
        for entry in self.abi:
            if entry.get("type", "function") == "function" and entry.get("name") == method_name:
                return entry
        raise MethodNotFound(f"Function {method_name} not found in {self.name} ABI")

    def selector(self, method_name: str) -> bytes:
        func = self.find(method_name)
        sig = f"{method_name}({','.join(_types(func.get('inputs', [])))})"
        return keccak256(sig.encode("utf-8"))[:4]

    def event_topic(self, event_name: str) -> str:
        for entry in self.abi:
            if entry.get("type") == "event" and entry.get("name") == event_name:
                sig = f"{event_name}({','.join(_types(entry.get('inputs', [])))})"
                return "0x" + keccak256(sig.encode("utf-8")).hex()
        raise MethodNotFound(f"Event {event_name} not found in {self.name} ABI")

    def encode_call(self, method_name: str, args: list[Any]) -> bytes:
        """ABI-encode a function call to calldata bytes."""
        func = self.find(method_name)
        input_types = _types(func.get("inputs", []))
        if len(args) != len(input_types):
            raise ValueError(
                f"{self.name}.{method_name} expects {len(input_types)} args, got {len(args)}"
            )
        values = [_coerce(t, v) for t, v in zip(input_types, args)]
        encoded_args = encode(input_types, values) if input_types else b""
        return self.selector(method_name) + encoded_args

    def decode_result(self, method_name: str, data: bytes) -> Any:
        """Decode return data: ``None`` for no outputs, a scalar for one, else a tuple."""
        output_types = _types(self.find(method_name).get("outputs", []))
        if not output_types:
            return None
        decoded = decode(output_types, data)
        if len(decoded) == 1:
            return decoded[0]
        return decoded

    @property
    def deploy_data(self) -> bytes:
        code = strip_0x(self.bytecode)
        if not code:
            raise ContractNotFound(f"No bytecode in artifact for {self.name}")
        return bytes.fromhex(code)


@lru_cache(maxsize=32)
def _read_artifact(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _bytecode(artifact: dict[str, Any]) -> str:
    for key in ("unlinked_binary", "bytecode"):
        value = artifact.get(key)
        if isinstance(value, dict):
            value = value.get("object")
        if value:
            return value if value.startswith("0x") else "0x" + value
    return "0x"


@dataclass(frozen=True)
class ContractRegistry:
    root: Path = PACKAGED_CONTRACTS

    def artifact_path(self, contract_name: str) -> Optional[Path]:
        for candidate in (
            self.root / f"{contract_name}.json",
            self.root / f"{contract_name}.sol" / f"{contract_name}.json",
        ):
            if candidate.is_file():
                return candidate
        return None

    def load(self, contract_name: str) -> ContractInterface:
        """
        Load a contract interface by name.

        Raises:
            ContractNotFound: If no artifact exists or it carries no ABI
        """
        path = self.artifact_path(contract_name)
        if path is None:
            raise ContractNotFound(f"Contract artifact not found: {contract_name} in {self.root}")
        artifact = _read_artifact(path)
        abi = artifact.get("abi")
        if not isinstance(abi, list):
            raise ContractNotFound(f"No ABI in artifact for {contract_name}")
        return ContractInterface(name=contract_name, abi=abi, bytecode=_bytecode(artifact))
