"""
MNID - Multi Network Identifier.

An MNID is a base58 string wrapping a chain-scoped address:

    version (1 byte, always 1) ‖ chain id (variable) ‖ address (20) ‖ checksum (4)

The checksum is the first four bytes of Keccak-256 over everything before
it.  The chain id length is not stored; it is recovered from the total
payload length on decode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import base58

from .errors import ChecksumError, MnidError
from .models import Address
from .utils import hex_to_bytes, keccak256

VERSION = 1
CHECKSUM_LENGTH = 4
ADDRESS_LENGTH = 20


@dataclass(frozen=True)
class DecodedMnid:
    chain_id: bytes
    address: Address

    @property
    def chain_id_hex(self) -> str:
        return "0x" + self.chain_id.hex()


def checksum(payload: bytes) -> bytes:
    return keccak256(payload)[:CHECKSUM_LENGTH]


def _chain_bytes(chain_id: Union[bytes, str]) -> bytes:
    if isinstance(chain_id, str):
        return hex_to_bytes(chain_id)
    return bytes(chain_id)


def encode(address: Union[Address, str], chain_id: Union[bytes, str]) -> str:
    """Encode ``address`` scoped to ``chain_id`` (bytes or hex string)."""
    if isinstance(address, str):
        address = Address.from_hex(address)
    payload = bytes([VERSION]) + _chain_bytes(chain_id) + address.value
    return base58.b58encode(payload + checksum(payload)).decode("ascii")


def _b58decode(value: str) -> bytes:
    try:
        return base58.b58decode(value)
    except ValueError as exc:
        raise MnidError(f"Not a base58 string: {value!r}") from exc


def decode(value: str) -> DecodedMnid:
    """Decode an MNID string.

    Raises:
        MnidError: If the string is not base58 or too short.
        ChecksumError: If the trailing checksum does not match the payload.
    """
    data = _b58decode(value)
    if len(data) <= ADDRESS_LENGTH + CHECKSUM_LENGTH:
        raise MnidError(f"MNID payload too short: {len(data)} bytes")

    payload, check = data[:-CHECKSUM_LENGTH], data[-CHECKSUM_LENGTH:]
    if checksum(payload) != check:
        raise ChecksumError(f"MNID checksum mismatch: {value}")

    split = len(data) - ADDRESS_LENGTH - CHECKSUM_LENGTH
    return DecodedMnid(
        chain_id=data[1:split],
        address=Address(data[split:-CHECKSUM_LENGTH]),
    )


def is_valid_mnid(value: str) -> bool:
    """Cheap structural check; the checksum is not verified."""
    try:
        data = base58.b58decode(value)
    except ValueError:
        return False
    return len(data) > ADDRESS_LENGTH + CHECKSUM_LENGTH and data[0] == VERSION
